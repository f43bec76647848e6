"""Merging of target-wide and file-specific rcc options."""
from __future__ import annotations

from typing import List, Sequence

VALUE_OPTIONS = frozenset({"name", "root", "compress", "threshold"})
"""rcc options that consume the following token as their value."""


def option_name(token: str, *, strip_double_dash: bool) -> str | None:
    """Return ``token`` without its leading dash(es), or ``None`` for non-options."""

    if not token.startswith("-"):
        return None
    name = token[1:]
    if strip_double_dash and name.startswith("-"):
        name = name[1:]
    return name


def is_value_option(token: str, *, strip_double_dash: bool) -> bool:
    return option_name(token, strip_double_dash=strip_double_dash) in VALUE_OPTIONS


def merge_options(
    target_options: Sequence[str],
    file_options: Sequence[str],
    *,
    strip_double_dash: bool,
) -> List[str]:
    """Merge ``file_options`` into ``target_options``.

    Switches present in both lists keep their position; when they carry a
    value the file's value wins. Switches only present in ``file_options`` are
    appended, together with their value, in the order they appear there.
    """

    merged = list(target_options)
    extra: List[str] = []
    index = 0
    while index < len(file_options):
        token = file_options[index]
        has_value = index + 1 < len(file_options)
        value_option = is_value_option(token, strip_double_dash=strip_double_dash)
        if token in merged:
            position = merged.index(token)
            if value_option and has_value and position + 1 < len(merged):
                merged[position + 1] = file_options[index + 1]
                index += 2
                continue
        else:
            extra.append(token)
            if value_option and has_value:
                extra.append(file_options[index + 1])
                index += 2
                continue
        index += 1
    merged.extend(extra)
    return merged


__all__ = ["VALUE_OPTIONS", "is_value_option", "merge_options", "option_name"]
