"""Acceptance policy for generated files that are eligible for moc/uic."""
from __future__ import annotations

from enum import Enum


class PolicyDecision(Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    REJECT_WITH_WARNING = "reject-with-warning"

    @property
    def accepted(self) -> bool:
        return self is PolicyDecision.ACCEPT


class GeneratedFilePolicy(str, Enum):
    """How GENERATED sources are treated by the reflection and UI tools.

    ``OLD`` ignores them silently, ``WARN`` ignores them and reports it,
    ``NEW`` and ``REQUIRED`` process them like any other source.
    """

    OLD = "OLD"
    WARN = "WARN"
    NEW = "NEW"
    REQUIRED = "REQUIRED"

    @classmethod
    def parse(cls, value: str) -> "GeneratedFilePolicy":
        normalized = str(value).strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown generated file policy '{value}' (allowed: {allowed})") from None

    def decide(self) -> PolicyDecision:
        return _DECISIONS[self]


_DECISIONS = {
    GeneratedFilePolicy.OLD: PolicyDecision.REJECT,
    GeneratedFilePolicy.WARN: PolicyDecision.REJECT_WITH_WARNING,
    GeneratedFilePolicy.NEW: PolicyDecision.ACCEPT,
    GeneratedFilePolicy.REQUIRED: PolicyDecision.ACCEPT,
}


__all__ = ["GeneratedFilePolicy", "PolicyDecision"]
