"""Accumulation of non-fatal planning diagnostics."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List
import logging

from .logging import get_logger

log = get_logger()


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    message: str
    target: str | None = None

    def __str__(self) -> str:
        prefix = f"[{self.target}] " if self.target else ""
        return f"{prefix}{self.severity.value}: {self.message}"


class Diagnostics:
    """Ordered collection of diagnostics, mirrored to the planner logger."""

    def __init__(self, *, target: str | None = None, logger: logging.Logger | None = None) -> None:
        self._items: List[Diagnostic] = []
        self._target = target
        self._log = logger or log

    def warning(self, message: str) -> Diagnostic:
        return self._record(Severity.WARNING, message)

    def error(self, message: str) -> Diagnostic:
        return self._record(Severity.ERROR, message)

    def _record(self, severity: Severity, message: str) -> Diagnostic:
        diagnostic = Diagnostic(severity=severity, message=message, target=self._target)
        self._items.append(diagnostic)
        level = logging.WARNING if severity is Severity.WARNING else logging.ERROR
        self._log.log(level, "%s", diagnostic)
        return diagnostic

    @property
    def errors(self) -> List[Diagnostic]:
        return [item for item in self._items if item.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [item for item in self._items if item.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(item.severity is Severity.ERROR for item in self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["Diagnostic", "Diagnostics", "Severity"]
