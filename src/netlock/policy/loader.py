"""Load lock options from YAML policy files."""

from __future__ import annotations

from pathlib import Path

import yaml

from netlock.policy.models import DestinationSource, LockOptions, SourceKind

_SOURCE_KEYS: tuple[tuple[str, SourceKind], ...] = (
    ("ips", SourceKind.ADDRESS),
    ("hosts", SourceKind.HOST),
    ("files", SourceKind.FILE),
)


def load_options(path: str | Path) -> LockOptions:
    """Load lock options from a YAML file path.

    Relative ``files`` entries are taken relative to the policy file.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    return load_options_from_string(text, base_dir=path.parent)


def load_options_from_string(text: str, base_dir: Path | None = None) -> LockOptions:
    """Parse a YAML string into LockOptions."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid policy YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Policy YAML must be a mapping")
    return _build_options(data, base_dir)


def _build_options(data: dict, base_dir: Path | None) -> LockOptions:
    sources: list[DestinationSource] = []
    for key, kind in _SOURCE_KEYS:
        for value in _string_list(data, key):
            if kind is SourceKind.FILE and base_dir is not None:
                value = str(base_dir / Path(value).expanduser())
            sources.append(DestinationSource(kind=kind, value=value))

    return LockOptions(
        allow_incoming=_flag(data, "allow_incoming"),
        allow_outgoing=_flag(data, "allow_outgoing"),
        allow_private_network=_flag(data, "allow_private_network"),
        allow_icmp=_flag(data, "allow_icmp"),
        interfaces=tuple(_string_list(data, "interfaces")),
        sources=tuple(sources),
        use_routing=_flag(data, "use_routing"),
        default_configuration_path=str(data.get("default_conf") or ""),
    )


def _flag(data: dict, key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _string_list(data: dict, key: str) -> list[str]:
    raw = data.get(key) or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError(f"{key} must be a list")
    return [str(item) for item in raw]
