"""Shared helpers for loading configuration mappings and coercing their values."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Sequence

import json
import tomllib

import yaml


ConfigLoader = Callable[[Any], Mapping[str, Any]]


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""

_TRUE_STRINGS = frozenset({"1", "on", "yes", "true", "y"})
_FALSE_STRINGS = frozenset({"0", "off", "no", "false", "n", "ignore", "notfound", ""})


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``."""

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(FILE_LOADERS)) or "<none>"
        raise ValueError(
            f"Unsupported configuration file extension: {suffix}. Supported: {supported}"
        )

    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    with path.open(mode, **kwargs) as handle:
        data = loader(handle)

    if not isinstance(data, Mapping):
        raise TypeError(f"Configuration file '{path}' must contain a mapping at the root")

    return data


def expand_list_argument(text: str) -> List[str]:
    """Split a ``;`` separated list string into its non-empty elements.

    A backslash-escaped separator (``\\;``) is kept as a literal ``;``.
    """

    items: List[str] = []
    current: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text) and text[index + 1] == ";":
            current.append(";")
            index += 2
            continue
        if char == ";":
            if current:
                items.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    if current:
        items.append("".join(current))
    return items


def normalize_string_list(value: Any, *, field_name: str | None = None) -> List[str]:
    """Coerce ``value`` into a list of strings.

    Strings are expanded as ``;`` separated lists, sequences must hold strings.
    """

    if value is None:
        return []

    if isinstance(value, (str, bytes)):
        return expand_list_argument(str(value))

    if isinstance(value, Sequence):
        items: List[str] = []
        for item in value:
            if not isinstance(item, (str, bytes)):
                label = f"{field_name} " if field_name else ""
                raise TypeError(f"{label}entries must be strings")
            text = str(item)
            if text:
                items.append(text)
        return items

    label = f"{field_name} " if field_name else ""
    raise TypeError(f"{label}must be a string or sequence of strings")


def normalize_bool(value: Any, *, field_name: str | None = None) -> bool:
    """Interpret ``value`` the way CMake interprets a boolean property."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS or text.endswith("-notfound"):
            return False
    label = f"{field_name} " if field_name else "value "
    raise ValueError(f"{label}is not a valid boolean: {value!r}")


def normalize_optional_string(value: Any, *, field_name: str | None = None) -> str | None:
    """Return ``value`` as a stripped string, or ``None`` when unset or blank."""

    if value is None:
        return None
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        text = str(value).strip()
        return text or None
    label = f"{field_name} " if field_name else "value "
    raise TypeError(f"{label}must be a string")


def reject_unknown_keys(data: Mapping[str, Any], allowed: frozenset[str] | set[str], *, label: str) -> None:
    unknown = {str(key) for key in data.keys() if str(key) not in allowed}
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"{label} contains unknown keys: {joined}")


__all__ = [
    "ConfigLoader",
    "FILE_LOADERS",
    "expand_list_argument",
    "load_config_file",
    "normalize_bool",
    "normalize_optional_string",
    "normalize_string_list",
    "reject_unknown_keys",
]
