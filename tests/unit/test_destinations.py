"""Tests for destination extraction from addresses, hosts and VPN configs."""

from __future__ import annotations

import socket
from pathlib import Path
from unittest.mock import patch

import pytest

from netlock.destinations import (
    extract_destinations,
    is_ip_address,
    parse_config_line,
    read_config_tokens,
    resolve_host,
)
from netlock.errors import DestinationError
from netlock.policy.models import DestinationSource, SourceKind


def _addrinfo(*addrs: str) -> list[tuple]:
    infos = []
    for addr in addrs:
        if ":" in addr:
            infos.append((socket.AF_INET6, socket.SOCK_STREAM, 6, "", (addr, 0, 0, 0)))
        else:
            infos.append((socket.AF_INET, socket.SOCK_STREAM, 6, "", (addr, 0)))
    return infos


def _fake_resolver(table: dict[str, list[str]]):
    def resolve(host: str) -> list[str]:
        if host not in table:
            raise DestinationError(f"cannot resolve {host}: Name or service not known")
        return table[host]

    return resolve


def address(value: str) -> DestinationSource:
    return DestinationSource(SourceKind.ADDRESS, value)


def host(value: str) -> DestinationSource:
    return DestinationSource(SourceKind.HOST, value)


def config_file(value: str | Path) -> DestinationSource:
    return DestinationSource(SourceKind.FILE, str(value))


class TestAddressValidation:
    @pytest.mark.parametrize("value", ["9.9.9.9", "2001:4860:4860::8888", "::1"])
    def test_valid(self, value):
        assert is_ip_address(value)

    @pytest.mark.parametrize("value", ["vpn.example.com", "999.1.1.1", "1.2.3", ""])
    def test_invalid(self, value):
        assert not is_ip_address(value)


class TestResolveHost:
    def test_all_addresses_in_order(self):
        with patch(
            "netlock.destinations.socket.getaddrinfo",
            return_value=_addrinfo("203.0.113.5", "2001:db8::5", "203.0.113.5"),
        ):
            assert resolve_host("vpn.example.com") == ["203.0.113.5", "2001:db8::5"]

    def test_zone_suffix_dropped(self):
        with patch(
            "netlock.destinations.socket.getaddrinfo",
            return_value=_addrinfo("fe80::1%en0"),
        ):
            assert resolve_host("router.local") == ["fe80::1"]

    def test_failure_raises(self):
        with patch(
            "netlock.destinations.socket.getaddrinfo",
            side_effect=socket.gaierror(8, "nodename nor servname provided"),
        ):
            with pytest.raises(DestinationError, match="nope.invalid"):
                resolve_host("nope.invalid")


class TestParseConfigLine:
    @pytest.mark.parametrize(
        ("line", "token"),
        [
            ("remote vpn.example.com 1194 udp", "vpn.example.com"),
            ("remote 198.51.100.7", "198.51.100.7"),
            ("  remote   10.0.0.1 443 tcp", "10.0.0.1"),
            ("Endpoint = 203.0.113.9:51820", "203.0.113.9"),
            ("Endpoint=wg.example.net:51820", "wg.example.net"),
            ("endpoint = [2001:db8::7]:51820", "2001:db8::7"),
            ("Endpoint = wg.example.net:51820  # primary", "wg.example.net"),
            ("Endpoint = [2001:db8::7]:51820 #backup", "2001:db8::7"),
        ],
    )
    def test_matches(self, line, token):
        assert parse_config_line(line) == token

    @pytest.mark.parametrize(
        "line",
        [
            "remote-random",
            "# remote vpn.example.com 1194",
            "remote abc 1194",
            "Endpoint = abc:51820",
            "Endpoint = 203.0.113.9",
            "AllowedIPs = 0.0.0.0/0, ::/0",
            "",
        ],
    )
    def test_ignored(self, line):
        assert parse_config_line(line) is None


class TestReadConfigTokens:
    def test_openvpn_file(self, fixtures_dir):
        tokens = read_config_tokens(fixtures_dir / "client.ovpn")
        assert tokens == ["vpn.example.com", "198.51.100.7"]

    def test_wireguard_file(self, fixtures_dir):
        assert read_config_tokens(fixtures_dir / "wg0.conf") == ["203.0.113.9"]

    def test_directory_scan_sorted_and_skips_hidden(self, tmp_path):
        (tmp_path / "b.conf").write_text("Endpoint = 203.0.113.2:51820\n")
        (tmp_path / "a.ovpn").write_text("remote 203.0.113.1 1194\n")
        (tmp_path / ".hidden.ovpn").write_text("remote 203.0.113.3 1194\n")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "c.ovpn").write_text("remote 203.0.113.4 1194\n")
        assert read_config_tokens(tmp_path) == ["203.0.113.1", "203.0.113.2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DestinationError, match="cannot read"):
            read_config_tokens(tmp_path / "missing.ovpn")


class TestExtractDestinations:
    def test_literal_address_verbatim(self):
        resolver = _fake_resolver({})
        assert extract_destinations([address("9.9.9.9")], resolver) == ("9.9.9.9",)

    def test_invalid_literal_treated_as_hostname(self):
        resolver = _fake_resolver({"vpn.example.com": ["203.0.113.5"]})
        result = extract_destinations([address("vpn.example.com")], resolver)
        assert result == ("203.0.113.5",)

    def test_host_expands_to_all_addresses(self):
        resolver = _fake_resolver({"vpn.example.com": ["203.0.113.5", "2001:db8::5"]})
        result = extract_destinations([host("vpn.example.com")], resolver)
        assert result == ("203.0.113.5", "2001:db8::5")

    def test_openvpn_remote_hostname(self, tmp_path):
        conf = tmp_path / "client.ovpn"
        conf.write_text("client\nremote vpn.example.com 1194 udp\n")
        with patch(
            "netlock.destinations.socket.getaddrinfo",
            return_value=_addrinfo("203.0.113.5"),
        ):
            result = extract_destinations([config_file(conf)])
        assert result[0] == "203.0.113.5"

    def test_first_seen_order_and_dedup(self, fixtures_dir):
        resolver = _fake_resolver({"vpn.example.com": ["203.0.113.5", "198.51.100.7"]})
        result = extract_destinations(
            [
                address("198.51.100.7"),
                config_file(fixtures_dir / "client.ovpn"),
                config_file(fixtures_dir / "wg6.conf"),
            ],
            resolver,
        )
        assert result == ("198.51.100.7", "203.0.113.5", "2001:db8::7")

    def test_unresolvable_host_in_file_fails_closed(self, tmp_path):
        conf = tmp_path / "client.ovpn"
        conf.write_text("remote 198.51.100.7 1194\nremote gone.example.com 1194\n")
        resolver = _fake_resolver({})
        with pytest.raises(DestinationError, match="gone.example.com"):
            extract_destinations([config_file(conf)], resolver)

    def test_missing_file_fails_before_later_inputs(self, tmp_path):
        calls: list[str] = []

        def resolver(name: str) -> list[str]:
            calls.append(name)
            return ["203.0.113.5"]

        with pytest.raises(DestinationError):
            extract_destinations(
                [config_file(tmp_path / "missing.ovpn"), host("vpn.example.com")],
                resolver,
            )
        assert calls == []

    def test_empty_input(self):
        assert extract_destinations([], _fake_resolver({})) == ()
