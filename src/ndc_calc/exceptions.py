"""Exception hierarchy for ndc-calc."""

from __future__ import annotations

from typing import Any

SIG_FORMAT_HINT = 'Please use a format like "Take 1 tablet twice daily".'


class NdcCalcError(Exception):
    """Base exception for all ndc-calc errors."""


class NotParseableError(NdcCalcError):
    """Raised when no SIG rule matches the instruction text."""

    def __init__(self, text: str, hint: str = SIG_FORMAT_HINT) -> None:
        super().__init__(f"Could not parse the prescription instructions {text!r}. {hint}")
        self.text = text
        self.hint = hint


class InvalidArgumentError(NdcCalcError):
    """A required numeric input is missing, zero, or out of range."""

    def __init__(self, field: str, value: Any, reason: str = "") -> None:
        message = f"Invalid value for {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.field = field
        self.value = value


class NoPackagesAvailableError(NdcCalcError):
    """The catalog is empty or holds no active packages after filtering."""

    def __init__(
        self,
        message: str = "No active packages available for this drug.",
        *,
        inactive_codes: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.inactive_codes = list(inactive_codes or [])


class DescriptorUnparseableError(NdcCalcError):
    """A catalog package descriptor has no recognisable package size.

    Non-fatal: the catalog builder skips the entry and counts it.
    """

    def __init__(self, descriptor: str) -> None:
        super().__init__(f"Could not parse package descriptor: {descriptor!r}")
        self.descriptor = descriptor


__all__ = [
    "NdcCalcError",
    "NotParseableError",
    "InvalidArgumentError",
    "NoPackagesAvailableError",
    "DescriptorUnparseableError",
    "SIG_FORMAT_HINT",
]
