from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from .errors import InvalidConfig

DEFAULT_MAX_COUNT = 1200
DEFAULT_MAX_BYTES = 4 * 1024 * 1024 * 1024  # 4 GiB
DEFAULT_EXTENSIONS: Tuple[str, ...] = ("jpg", "jpeg")
MAX_SEED = 2**64

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([A-Za-z]*)\s*$")
_SIZE_UNITS: Dict[str, int] = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kib": 1024,
    "m": 1024**2,
    "mib": 1024**2,
    "g": 1024**3,
    "gib": 1024**3,
    "t": 1024**4,
    "tib": 1024**4,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
}


def _normalize_path(candidate: Path, root: Path) -> Path:
    expanded = candidate.expanduser()
    if expanded.is_absolute():
        return expanded.resolve()
    return (root / expanded).resolve()


def _path(value: Any, root: Path) -> Path:
    candidate = value if isinstance(value, Path) else Path(value)
    return _normalize_path(candidate, root)


def parse_size(value: Any, field_name: str = "max_bytes") -> int:
    """Parse ``4294967296``, ``"4GiB"``, ``"500MB"`` or ``"2G"`` into bytes.

    Bare ``K/M/G/T`` and ``KiB/MiB/GiB/TiB`` are binary units; ``KB/MB/GB/TB``
    are decimal.
    """

    if isinstance(value, bool):
        raise InvalidConfig(field_name, value, "expected a byte count")
    if isinstance(value, int):
        return value
    match = _SIZE_PATTERN.match(str(value))
    if match is None:
        raise InvalidConfig(field_name, value, "expected a byte count such as 4294967296 or 4GiB")
    digits, unit = match.groups()
    multiplier = _SIZE_UNITS.get(unit.lower())
    if multiplier is None:
        raise InvalidConfig(field_name, value, f"unknown size unit {unit!r}")
    return int(digits) * multiplier


def normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    normalized = []
    for ext in extensions:
        cleaned = str(ext).strip().lstrip(".").lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return tuple(normalized)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_limits(max_count: Any, max_bytes: Any) -> None:
    if not _is_int(max_count) or max_count < 1:
        raise InvalidConfig("max_count", max_count, "must be an integer > 0")
    if not _is_int(max_bytes) or max_bytes < 1:
        raise InvalidConfig("max_bytes", max_bytes, "must be an integer > 0")


def validate_seed(seed: Any) -> None:
    if seed is not None and (not _is_int(seed) or not 0 <= seed < MAX_SEED):
        raise InvalidConfig("seed", seed, "must be an integer in [0, 2**64)")


@dataclass
class DistributionConfig:
    source_dir: Optional[Path] = None
    dest_dir: Optional[Path] = None
    max_count: int = DEFAULT_MAX_COUNT
    max_bytes: int = DEFAULT_MAX_BYTES
    seed: Optional[int] = None
    extensions: Tuple[str, ...] = field(default=DEFAULT_EXTENSIONS)

    def validate(self) -> None:
        """Check numeric limits and extensions before any work starts."""
        validate_limits(self.max_count, self.max_bytes)
        validate_seed(self.seed)
        if not self.extensions:
            raise InvalidConfig("extensions", self.extensions, "at least one extension is required")


def load_config(path: str | Path) -> DistributionConfig:
    file_path = Path(path).expanduser().resolve()
    try:
        payload = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidConfig("config", str(file_path), f"cannot read file: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidConfig("config", str(file_path), f"invalid YAML: {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidConfig("config", str(file_path), "top level must be a mapping")

    known = {item.name for item in fields(DistributionConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise InvalidConfig("config", str(file_path), f"unknown keys: {', '.join(unknown)}")

    data: Dict[str, Any] = dict(payload)
    for key in ("source_dir", "dest_dir"):
        if data.get(key) is not None:
            data[key] = _path(data[key], file_path.parent)
    if "max_bytes" in data:
        data["max_bytes"] = parse_size(data["max_bytes"])
    if "extensions" in data:
        raw = data["extensions"]
        if isinstance(raw, str):
            raw = [raw]
        data["extensions"] = normalize_extensions(raw)
    return DistributionConfig(**data)
