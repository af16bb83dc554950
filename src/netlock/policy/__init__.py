"""Lock policy: raw options, the immutable Policy value, and YAML loading."""

from netlock.policy.models import (
    DestinationSource,
    LockOptions,
    Policy,
    SourceKind,
)

__all__ = ["DestinationSource", "LockOptions", "Policy", "SourceKind"]
