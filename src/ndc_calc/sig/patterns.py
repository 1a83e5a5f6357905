"""Regex tables for SIG (prescription instruction) interpretation.

Three ordered tables drive the interpreter:

- ``SIG_RULES``: whole-instruction rules; the first match wins.
- ``UNIT_PATTERNS``: surface unit tokens to canonical units.
- ``FREQUENCY_PATTERNS``: frequency phrases to doses per day.

All patterns run against text already normalized by
``normalizers.normalize_sig_text`` (lower-case, single spaces).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional

FrequencyKind = Literal["phrase", "hours", "count", "fixed"]


@dataclass(frozen=True)
class SigRule:
    """A single row of the SIG decision table.

    ``frequency_kind`` says how the frequency is obtained:

    - ``phrase``: group ``frequency_group`` is resolved via ``FREQUENCY_PATTERNS``
    - ``hours``: group holds an interval N, frequency is ``floor(24 / N)``
    - ``count``: group holds the number of doses per day
    - ``fixed``: the pattern text itself fixes ``fixed_frequency``
    """

    name: str
    pattern: re.Pattern[str]
    priority: int
    dosage_group: int = 1
    unit_group: int = 2
    frequency_group: int = 0
    frequency_kind: FrequencyKind = "fixed"
    fixed_frequency: Optional[int] = None
    default_unit: str = "tablet"
    loose: bool = False


@dataclass(frozen=True)
class UnitPattern:
    """Surface spelling(s) of one canonical unit."""

    pattern: re.Pattern[str]
    canonical: str


@dataclass(frozen=True)
class FrequencyPattern:
    """A frequency phrase.

    Either a fixed ``per_day`` count, or an interval whose first group is N
    and ``interval_minutes`` is the length of one interval unit.
    """

    pattern: re.Pattern[str]
    per_day: Optional[int] = None
    interval_minutes: Optional[int] = None


# ── Building blocks ──────────────────────────────────────────────────

# "1", "1.5", "1-2"
_DOSE = r"(\d+(?:\.\d+)?(?:\s*-\s*\d+(?:\.\d+)?)?)"
_UNIT = r"([a-z]+)"
_VERB = r"\b(?:take|inhale|inject|use|give|administer|instill)"
_ROUTE = (
    r"(?:by\s+mouth|orally|po|sublingually|subcutaneously|subq|sc|"
    r"by\s+inhalation|via\s+inhalation|into\s+the\s+lungs)"
)
_DAY = r"(?:daily|a\s+day|per\s+day|each\s+day)"
# Interval N, optionally a range "4-6" / "4 to 6" (shorter interval wins)
_INTERVAL = r"(\d+)(?:\s*(?:-|to)\s*\d+)?"


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


# ── SIG rules ────────────────────────────────────────────────────────

_SIG_RULES_DECLARED: tuple[SigRule, ...] = (
    # "take 1 tablet by mouth twice daily with food"
    SigRule(
        name="verb_dose_route_frequency",
        pattern=_rx(
            _VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+" + _ROUTE + r"\s+(.+?)"
            r"(?:\s+with\s+(?:food|meals?|water)|\s+for\s+.+)?$"
        ),
        priority=10,
        frequency_group=3,
        frequency_kind="phrase",
    ),
    # "take 1 tablet every 6 hours"
    SigRule(
        name="verb_dose_every_hours",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+every\s+" + _INTERVAL + r"\s+hours?\b"),
        priority=9,
        frequency_group=3,
        frequency_kind="hours",
    ),
    # "take 1 tablet in the morning and 1 tablet in the evening"
    SigRule(
        name="verb_dose_morning_and_evening",
        pattern=_rx(
            _VERB + r"\s+(\d+(?:\.\d+)?)\s+" + _UNIT
            + r"\s+in\s+the\s+morning\s+and\s+\d+(?:\.\d+)?\s+[a-z]+\s+in\s+the\s+evening"
        ),
        priority=9,
        fixed_frequency=2,
    ),
    # "2 tablets 3 times daily"
    SigRule(
        name="dose_times_daily",
        pattern=_rx(_DOSE + r"\s+" + _UNIT + r"\s+(\d+)\s+times\s+" + _DAY),
        priority=8,
        frequency_group=3,
        frequency_kind="count",
    ),
    SigRule(
        name="verb_dose_twice_daily",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+twice\s+" + _DAY),
        priority=8,
        fixed_frequency=2,
    ),
    SigRule(
        name="verb_dose_once_daily",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+once\s+" + _DAY),
        priority=8,
        fixed_frequency=1,
    ),
    SigRule(
        name="verb_dose_three_times_daily",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+three\s+times\s+" + _DAY),
        priority=8,
        fixed_frequency=3,
    ),
    SigRule(
        name="verb_dose_four_times_daily",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+four\s+times\s+" + _DAY),
        priority=8,
        fixed_frequency=4,
    ),
    SigRule(
        name="verb_dose_every_morning_evening",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+every\s+(?:morning|evening|night|am|pm)\b"),
        priority=7,
        fixed_frequency=1,
    ),
    SigRule(
        name="verb_dose_at_bedtime",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\s+at\s+bedtime"),
        priority=7,
        fixed_frequency=1,
    ),
    # Same shapes without a leading verb
    SigRule(
        name="dose_route_frequency",
        pattern=_rx(
            r"\b" + _DOSE + r"\s+" + _UNIT + r"\s+" + _ROUTE + r"\s+(.+?)"
            r"(?:\s+with\s+(?:food|meals?|water)|\s+for\s+.+)?$"
        ),
        priority=6,
        frequency_group=3,
        frequency_kind="phrase",
    ),
    SigRule(
        name="dose_every_hours",
        pattern=_rx(r"\b" + _DOSE + r"\s+" + _UNIT + r"\s+every\s+" + _INTERVAL + r"\s+hours?\b"),
        priority=6,
        frequency_group=3,
        frequency_kind="hours",
    ),
    # "take 1 tablet ... as needed"
    SigRule(
        name="verb_dose_prn",
        pattern=_rx(_VERB + r"\s+" + _DOSE + r"\s+" + _UNIT + r"\b.*?\b(?:as\s+needed|prn|as\s+directed)\b"),
        priority=6,
        fixed_frequency=0,
    ),
    SigRule(
        name="dose_twice_daily",
        pattern=_rx(r"\b" + _DOSE + r"\s+" + _UNIT + r"\s+twice\s+" + _DAY),
        priority=5,
        fixed_frequency=2,
    ),
    SigRule(
        name="dose_once_daily",
        pattern=_rx(r"\b" + _DOSE + r"\s+" + _UNIT + r"\s+once\s+" + _DAY),
        priority=5,
        fixed_frequency=1,
    ),
    SigRule(
        name="dose_daily",
        pattern=_rx(r"\b" + _DOSE + r"\s+" + _UNIT + r"\s+daily\b"),
        priority=4,
        fixed_frequency=1,
    ),
)

# Descending priority; ``sorted`` is stable so ties keep declaration order.
SIG_RULES: tuple[SigRule, ...] = tuple(
    sorted(_SIG_RULES_DECLARED, key=lambda rule: -rule.priority)
)


# ── Units ────────────────────────────────────────────────────────────

UNIT_PATTERNS: tuple[UnitPattern, ...] = (
    UnitPattern(_rx(r"tablets?|tabs?"), "tablet"),
    UnitPattern(_rx(r"capsules?|caps?"), "capsule"),
    UnitPattern(_rx(r"pills?"), "pill"),
    UnitPattern(_rx(r"ml|mls|milliliters?|millilitres?|cc"), "mL"),
    UnitPattern(_rx(r"l|liters?|litres?"), "L"),
    UnitPattern(_rx(r"units?|u|iu"), "unit"),
    UnitPattern(_rx(r"actuations?|puffs?|inhalations?|sprays?"), "actuation"),
    UnitPattern(_rx(r"mg|milligrams?"), "mg"),
    UnitPattern(_rx(r"mcg|micrograms?|ug"), "mcg"),
    UnitPattern(_rx(r"g|gm|grams?"), "g"),
)

# Spoon measures, converted to mL at interpretation time
HOUSEHOLD_MEASURES: tuple[tuple[re.Pattern[str], Decimal], ...] = (
    (_rx(r"tsps?|teaspoons?|teaspoonfuls?"), Decimal("5")),
    (_rx(r"tbsps?|tablespoons?|tablespoonfuls?"), Decimal("15")),
)

DISCRETE_UNITS: frozenset[str] = frozenset({"tablet", "capsule", "pill", "actuation", "unit"})
VOLUME_UNITS: frozenset[str] = frozenset({"mL", "L"})
MASS_UNITS: frozenset[str] = frozenset({"mcg", "mg", "g"})

# Units that can stand in for one another when matching packages
SOLID_UNITS: frozenset[str] = frozenset({"tablet", "capsule", "pill"})


# ── Frequencies ──────────────────────────────────────────────────────
# Most specific first: "daily" alone must come after the counted forms.

FREQUENCY_PATTERNS: tuple[FrequencyPattern, ...] = (
    FrequencyPattern(_rx(r"\bfour\s+times\s+" + _DAY), per_day=4),
    FrequencyPattern(_rx(r"\bq\.?i\.?d\b\.?"), per_day=4),
    FrequencyPattern(_rx(r"\bthree\s+times\s+" + _DAY), per_day=3),
    FrequencyPattern(_rx(r"\bt\.?i\.?d\b\.?"), per_day=3),
    FrequencyPattern(_rx(r"\btwice\s+" + _DAY), per_day=2),
    FrequencyPattern(_rx(r"\bb\.?i\.?d\b\.?"), per_day=2),
    FrequencyPattern(_rx(r"\bonce\s+" + _DAY), per_day=1),
    FrequencyPattern(_rx(r"\bq\.?d\b\.?"), per_day=1),
    FrequencyPattern(_rx(r"\bdaily\b"), per_day=1),
    FrequencyPattern(_rx(r"\bevery\s+" + _INTERVAL + r"\s+hours?\b"), interval_minutes=60),
    FrequencyPattern(_rx(r"\bq\s*(\d+)\s*h(?:rs?|ours?)?\b"), interval_minutes=60),
    FrequencyPattern(_rx(r"\bevery\s+" + _INTERVAL + r"\s+min(?:ute)?s?\b"), interval_minutes=1),
    FrequencyPattern(_rx(r"\bin\s+the\s+morning\s+and\s+(?:in\s+the\s+)?evening\b"), per_day=2),
    FrequencyPattern(_rx(r"\b(?:every\s+|in\s+the\s+)?(?:morning|am)\b"), per_day=1),
    FrequencyPattern(_rx(r"\b(?:every\s+|in\s+the\s+)?(?:evening|night|pm)\b|\bat\s+bedtime\b|\bbedtime\b|\bqhs\b|\bhs\b"), per_day=1),
    FrequencyPattern(_rx(r"\b(?:as\s+needed|prn|as\s+directed)\b"), per_day=0),
)
