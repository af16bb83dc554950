"""netlock — pf killswitch controller for VPN-only networking."""

__version__ = "0.1.0"
