"""SIG interpretation: ordered rule table, first match wins.

Rules in ``SIG_RULES`` are tried in descending priority.  The first rule
whose pattern matches decides the result; there is no scoring across rules.
Confidence reflects how many of dosage / unit / frequency were captured
directly rather than defaulted.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ndc_calc.exceptions import NotParseableError
from ndc_calc.models import Concentration, DosageForm, ParsedSig
from ndc_calc.sig.normalizers import (
    normalize_sig_text,
    per_day_from_interval,
    resolve_frequency,
    resolve_household_measure,
    resolve_unit,
)
from ndc_calc.sig.patterns import MASS_UNITS, SIG_RULES, VOLUME_UNITS, SigRule

log = logging.getLogger(__name__)

CONFIDENCE_EXACT = 0.95
CONFIDENCE_PARTIAL = 0.85
CONFIDENCE_WEAK = 0.75

# Used when a captured frequency phrase is not in the frequency table
DEFAULT_FREQUENCY = 1

_RANGE = re.compile(r"(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)")
_CONCENTRATION = re.compile(
    r"(\d+(?:\.\d+)?)\s*(mg|mcg|g)\s*(?:/|per)\s*(\d+(?:\.\d+)?)?\s*(ml|l)\b"
)
_INSULIN_STRENGTH = re.compile(r"\bu-?(\d+)\b")
_INHALER_CAPACITY = re.compile(
    r"(\d+)\s+(?:actuations?|puffs?|inhalations?|sprays?|doses?)\s+per\s+(?:canister|inhaler|device|container)"
)
_INSULIN_HINT = re.compile(r"\binsulin\b|\bsubcutaneous(?:ly)?\b|\bsubq\b|\bsc\b")


class SigInterpreter:
    """Interprets free-text dosing instructions using a fixed rule table."""

    def __init__(self, rules: tuple[SigRule, ...] = SIG_RULES) -> None:
        self._rules = rules

    @property
    def rules(self) -> tuple[SigRule, ...]:
        return self._rules

    def match(self, text: str) -> Optional[tuple[SigRule, re.Match[str]]]:
        """Return the first matching rule and its match, or ``None``."""
        for rule in self._rules:
            found = rule.pattern.search(text)
            if found:
                return rule, found
        return None

    def interpret(self, text: str) -> ParsedSig:
        """Interpret ``text`` into a ``ParsedSig``.

        Raises:
            NotParseableError: if the text is empty or no rule matches.
        """
        normalized = normalize_sig_text(text)
        if not normalized:
            raise NotParseableError(text or "")

        matched = self.match(normalized)
        if matched is None:
            log.info("No SIG rule matched: %.50s", text)
            raise NotParseableError(text)
        rule, found = matched

        dosage = _extract_dosage(found.group(rule.dosage_group))
        if dosage is None:
            raise NotParseableError(text, hint="Dosage must be a positive number.")

        defaulted = 0

        unit_token = found.group(rule.unit_group)
        unit = resolve_unit(unit_token)
        spoon_ml = resolve_household_measure(unit_token) if unit is None else None
        if spoon_ml is not None:
            dosage, unit = dosage * spoon_ml, "mL"
        elif unit is None:
            unit = rule.default_unit
            defaulted += 1

        frequency = _extract_frequency(rule, found)
        if frequency is None:
            frequency = DEFAULT_FREQUENCY
            defaulted += 1

        confidence = _score(defaulted, loose=rule.loose)
        concentration = extract_concentration(normalized)

        log.debug(
            "SIG rule %s matched (dosage=%s unit=%s frequency=%s confidence=%.2f)",
            rule.name, dosage, unit, frequency, confidence,
        )

        return ParsedSig(
            dosage_amount=dosage,
            frequency_per_day=frequency,
            unit=unit,
            confidence=confidence,
            dosage_form=detect_dosage_form(unit, normalized, has_concentration=concentration is not None),
            concentration=concentration,
            inhaler_capacity=extract_inhaler_capacity(normalized),
            insulin_strength=extract_insulin_strength(normalized),
            rule_name=rule.name,
        )


_DEFAULT_INTERPRETER = SigInterpreter()


def parse_sig(text: str) -> ParsedSig:
    """Interpret ``text`` with the default rule table."""
    return _DEFAULT_INTERPRETER.interpret(text)


# ── Field extraction ─────────────────────────────────────────────────


def _extract_dosage(raw: Optional[str]) -> Optional[Decimal]:
    """Parse "2" or "1.5"; a range "1-2" becomes its midpoint."""
    if not raw:
        return None
    raw = raw.strip()
    try:
        range_match = _RANGE.fullmatch(raw)
        if range_match:
            dosage = (Decimal(range_match.group(1)) + Decimal(range_match.group(2))) / 2
        else:
            dosage = Decimal(raw)
    except InvalidOperation:
        return None
    return dosage if dosage > 0 else None


def _extract_frequency(rule: SigRule, found: re.Match[str]) -> Optional[int]:
    if rule.frequency_kind == "fixed":
        return rule.fixed_frequency

    captured = found.group(rule.frequency_group) if rule.frequency_group else None
    if not captured:
        return None
    if rule.frequency_kind == "phrase":
        return resolve_frequency(captured)
    if rule.frequency_kind == "hours":
        return per_day_from_interval(int(captured), 60)
    # count
    return int(captured)


def _score(defaulted: int, *, loose: bool) -> float:
    if loose or defaulted >= 2:
        return CONFIDENCE_WEAK
    if defaulted == 1:
        return CONFIDENCE_PARTIAL
    return CONFIDENCE_EXACT


# ── Dosage-form metadata ─────────────────────────────────────────────


def detect_dosage_form(unit: str, text: str, *, has_concentration: bool = False) -> DosageForm:
    """Infer the dosage form from the canonical unit and the SIG wording.

    A concentration only marks a mass dose as liquid; a discrete unit keeps
    its own form.
    """
    if unit in VOLUME_UNITS or (has_concentration and unit in MASS_UNITS):
        return DosageForm.LIQUID
    if unit == "unit":
        return DosageForm.INSULIN if _INSULIN_HINT.search(text) else DosageForm.OTHER
    if unit == "actuation":
        return DosageForm.INHALER
    if unit in ("tablet", "pill"):
        return DosageForm.TABLET
    if unit == "capsule":
        return DosageForm.CAPSULE
    return DosageForm.OTHER


def extract_concentration(text: str) -> Optional[Concentration]:
    """Find "5 mg/ml", "10 mg per 5 ml" or "250 mg/5 ml" in the text."""
    found = _CONCENTRATION.search(text)
    if not found:
        return None
    amount = Decimal(found.group(1))
    volume = Decimal(found.group(3)) if found.group(3) else Decimal(1)
    if amount <= 0 or volume <= 0:
        return None
    return Concentration(
        amount_per_dose=amount,
        dose_unit=found.group(2),
        volume_per_dose=volume,
        volume_unit="mL" if found.group(4) == "ml" else "L",
    )


def extract_insulin_strength(text: str) -> Optional[int]:
    """Insulin strength from "U-100" / "u200" (units per mL)."""
    found = _INSULIN_STRENGTH.search(text)
    if not found:
        return None
    strength = int(found.group(1))
    return strength if strength > 0 else None


def extract_inhaler_capacity(text: str) -> Optional[int]:
    """Actuations per canister from "200 puffs per inhaler"."""
    found = _INHALER_CAPACITY.search(text)
    if not found:
        return None
    capacity = int(found.group(1))
    return capacity if capacity > 0 else None
