"""Token normalizers used by the SIG interpreter."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

from ndc_calc.sig.patterns import FREQUENCY_PATTERNS, HOUSEHOLD_MEASURES, UNIT_PATTERNS

_PUNCTUATION = re.compile(r"[,;:!?]")
_WHITESPACE = re.compile(r"\s+")
# "5ml" -> "5 ml", but leave "q6h" alone
_GLUED_NUMBER = re.compile(r"(?<![a-z\d.])(\d+(?:\.\d+)?)([a-z]+)")


def normalize_sig_text(text: str) -> str:
    """Lower-case, strip punctuation and collapse whitespace.

    Periods inside numbers and abbreviations (``1.5``, ``b.i.d.``) survive;
    a trailing sentence period does not.
    """
    if not text:
        return ""
    normalized = text.lower().replace("(s)", "s")
    normalized = _PUNCTUATION.sub(" ", normalized)
    normalized = _GLUED_NUMBER.sub(r"\1 \2", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    if normalized.endswith(".") and not re.search(r"\b(?:[a-z]\.){2,}$", normalized):
        normalized = normalized[:-1].rstrip()
    return normalized


def resolve_unit(token: str) -> Optional[str]:
    """Map a surface unit token (``tabs``, ``puffs``) to its canonical unit."""
    candidate = (token or "").strip().lower()
    if not candidate:
        return None
    for unit_pattern in UNIT_PATTERNS:
        if unit_pattern.pattern.fullmatch(candidate):
            return unit_pattern.canonical
    return None


def resolve_household_measure(token: str) -> Optional[Decimal]:
    """mL per spoon measure (``tsp`` -> 5), or ``None`` for any other token."""
    candidate = (token or "").strip().lower()
    for pattern, millilitres in HOUSEHOLD_MEASURES:
        if candidate and pattern.fullmatch(candidate):
            return millilitres
    return None


def resolve_frequency(phrase: str) -> Optional[int]:
    """Map a frequency phrase to doses per day.

    Returns ``0`` for as-needed phrases and ``None`` when nothing in the
    frequency table matches.
    """
    candidate = (phrase or "").strip().lower()
    if not candidate:
        return None
    for freq_pattern in FREQUENCY_PATTERNS:
        match = freq_pattern.pattern.search(candidate)
        if not match:
            continue
        if freq_pattern.per_day is not None:
            return freq_pattern.per_day
        return per_day_from_interval(int(match.group(1)), freq_pattern.interval_minutes or 60)
    return None


def per_day_from_interval(interval: int, interval_minutes: int = 60) -> Optional[int]:
    """Doses per day for "every N <unit>": ``floor(1440 / (N * minutes))``."""
    if interval <= 0:
        return None
    return (24 * 60) // (interval * interval_minutes)
