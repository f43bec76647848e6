"""Reading and writing of the key/value descriptor consumed at build time."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Sequence
import re
import stat

from .errors import DescriptorWriteError

NESTED_LIST_SEPARATOR = "@LSEP@"

_SET_PATTERN = re.compile(r'^set\((?P<key>[A-Za-z0-9_.+-]+) "(?P<value>(?:[^"\\]|\\.)*)"\)$')
_UNESCAPE_PATTERN = re.compile(r"\\(.)")
_CONTROL_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


def escape_for_cmake(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def unescape_cmake(value: str) -> str:
    def replace(match: re.Match[str]) -> str:
        char = match.group(1)
        return _CONTROL_ESCAPES.get(char, char)

    return _UNESCAPE_PATTERN.sub(replace, value)


def format_descriptor(sections: Sequence[tuple[str, Sequence[tuple[str, str]]]]) -> str:
    """Render ``(title, entries)`` sections as CMake ``set()`` declarations."""

    lines = []
    for title, entries in sections:
        if not entries:
            continue
        if lines:
            lines.append("")
        lines.append(f"# {title}")
        for key, value in entries:
            lines.append(f"set({key} {escape_for_cmake(value)})")
    return "\n".join(lines) + "\n"


def parse_descriptor(text: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        match = _SET_PATTERN.match(line)
        if match is None:
            raise ValueError(f"Malformed descriptor line {number}: {raw_line!r}")
        values[match.group("key")] = unescape_cmake(match.group("value"))
    return values


def read_descriptor(path: Path) -> Dict[str, str]:
    return parse_descriptor(path.read_text(encoding="utf-8"))


def _ensure_writable(path: Path) -> None:
    if not path.exists():
        return
    mode = path.stat().st_mode
    if not mode & stat.S_IWUSR:
        path.chmod(stat.S_IMODE(mode) | stat.S_IWUSR)


def write_descriptor(path: Path, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories on demand."""

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _ensure_writable(path)
        with path.open("w", encoding="utf-8", newline="\n") as handle:
            handle.write(content)
    except OSError as exc:
        raise DescriptorWriteError(path, exc.strerror or str(exc)) from exc


def split_list(value: str, separator: str = ";") -> list[str]:
    return value.split(separator) if value else []


def join_nested(values: Iterable[str]) -> str:
    return NESTED_LIST_SEPARATOR.join(values)


__all__ = [
    "NESTED_LIST_SEPARATOR",
    "escape_for_cmake",
    "format_descriptor",
    "join_nested",
    "parse_descriptor",
    "read_descriptor",
    "split_list",
    "unescape_cmake",
    "write_descriptor",
]
