"""Convert a ``ParsedSig`` plus days' supply into a total dispensed quantity.

Dosage-form handling:

- liquid with a concentration and a mass dose (``500 mcg`` of ``1 mg/mL``):
  the dose is brought to the concentration's mass unit, converted to volume,
  and the result is in the concentration's volume unit.
- inhaler with a known capacity: the total stays in actuations and
  ``canister_count`` is reported as a hint.
- insulin: the total stays in units and ``insulin_volume_ml`` is reported as
  a hint, at the stated strength or U-100 when none is given.

As-needed SIGs (frequency 0) are calculated as once daily; the substitution
is visible in ``breakdown.effective_frequency`` and ``prn_assumed``.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal
from typing import Optional

from ndc_calc.core.config import QuantityConfig
from ndc_calc.exceptions import InvalidArgumentError
from ndc_calc.models import DosageForm, ParsedSig, QuantityBreakdown, QuantityResult
from ndc_calc.quantity.units import convert_mass, insulin_units_to_ml, round_quantity

log = logging.getLogger(__name__)


def calculate_quantity(
    parsed_sig: ParsedSig,
    days_supply: int,
    *,
    config: Optional[QuantityConfig] = None,
) -> QuantityResult:
    """Total quantity needed to cover ``days_supply`` days.

    Raises:
        InvalidArgumentError: dosage not positive, negative frequency, or
            days supply outside ``[1, max_days_supply]``.
    """
    config = config or QuantityConfig()
    _validate(parsed_sig, days_supply, config)

    prn_assumed = parsed_sig.frequency_per_day == 0
    effective_frequency = 1 if prn_assumed else parsed_sig.frequency_per_day
    if prn_assumed:
        log.warning(
            "As-needed SIG: assuming once daily for quantity (dosage=%s, days=%d)",
            parsed_sig.dosage_amount, days_supply,
        )
    if days_supply > config.long_supply_warning_days:
        log.warning("Long days' supply requested: %d days", days_supply)

    per_dose, unit = _per_dose(parsed_sig)
    raw_total = per_dose * effective_frequency * days_supply
    total = round_quantity(raw_total, unit, config.volume_decimal_places)

    canister_count: Optional[int] = None
    if parsed_sig.dosage_form == DosageForm.INHALER and parsed_sig.inhaler_capacity:
        canister_count = int(
            (total / parsed_sig.inhaler_capacity).to_integral_value(rounding=ROUND_CEILING)
        )

    insulin_volume_ml: Optional[Decimal] = None
    strength = parsed_sig.insulin_strength
    if strength is None and parsed_sig.dosage_form == DosageForm.INSULIN:
        strength = config.default_insulin_strength
    if strength and unit == "unit":
        insulin_volume_ml = insulin_units_to_ml(total, strength, config.volume_decimal_places)

    return QuantityResult(
        total=total,
        unit=unit,
        breakdown=QuantityBreakdown(
            dosage_amount=parsed_sig.dosage_amount,
            effective_frequency=effective_frequency,
            days_supply=days_supply,
        ),
        prn_assumed=prn_assumed,
        canister_count=canister_count,
        insulin_volume_ml=insulin_volume_ml,
    )


def _validate(parsed_sig: ParsedSig, days_supply: int, config: QuantityConfig) -> None:
    # model_construct() skips ParsedSig validation
    if parsed_sig.dosage_amount is None or parsed_sig.dosage_amount <= 0:
        raise InvalidArgumentError("dosage_amount", parsed_sig.dosage_amount, "must be positive")
    if parsed_sig.frequency_per_day is None or parsed_sig.frequency_per_day < 0:
        raise InvalidArgumentError("frequency_per_day", parsed_sig.frequency_per_day, "must not be negative")
    if isinstance(days_supply, bool) or not isinstance(days_supply, int):
        raise InvalidArgumentError("days_supply", days_supply, "must be a whole number of days")
    if not 1 <= days_supply <= config.max_days_supply:
        raise InvalidArgumentError(
            "days_supply", days_supply, f"must be between 1 and {config.max_days_supply}"
        )


def _per_dose(parsed_sig: ParsedSig) -> tuple[Decimal, str]:
    """Amount per dose and the unit the total is expressed in.

    The concentration applies only when the dose is a mass that converts to
    the concentration's own mass unit; otherwise the dose is used as written.
    """
    concentration = parsed_sig.concentration
    if parsed_sig.dosage_form != DosageForm.LIQUID or concentration is None:
        return parsed_sig.dosage_amount, parsed_sig.unit
    dose = convert_mass(parsed_sig.dosage_amount, parsed_sig.unit, concentration.dose_unit)
    if dose is None:
        return parsed_sig.dosage_amount, parsed_sig.unit
    volume = dose / concentration.amount_per_dose * concentration.volume_per_dose
    return volume, concentration.volume_unit
