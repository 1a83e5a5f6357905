"""Unit categories, conversions and rounding for dispensed quantities."""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Literal, Optional

from ndc_calc.sig.patterns import DISCRETE_UNITS, MASS_UNITS, SOLID_UNITS, VOLUME_UNITS

UnitCategory = Literal["discrete", "volume", "mass", "other"]

# Size of one unit in the smallest unit of its family
_MASS_IN_MCG = {"mcg": Decimal(1), "mg": Decimal(1000), "g": Decimal(1000000)}
_VOLUME_IN_ML = {"mL": Decimal(1), "L": Decimal(1000)}


def unit_category(unit: str) -> UnitCategory:
    if unit in DISCRETE_UNITS:
        return "discrete"
    if unit in VOLUME_UNITS:
        return "volume"
    if unit in MASS_UNITS:
        return "mass"
    return "other"


def round_quantity(total: Decimal, unit: str, places: int = 2) -> Decimal:
    """Round a total for dispensing.

    Discrete units round up to the next whole number; volumes and every other
    unit round half-up to ``places`` decimals.  Rounding an already-rounded
    value returns it unchanged.
    """
    if unit_category(unit) == "discrete":
        return total.to_integral_value(rounding=ROUND_CEILING)
    return total.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def convert_mass(value: Decimal, from_unit: str, to_unit: str) -> Optional[Decimal]:
    """Convert between ``mcg``, ``mg`` and ``g``; ``None`` if either is not a mass unit."""
    if from_unit not in _MASS_IN_MCG or to_unit not in _MASS_IN_MCG:
        return None
    return Decimal(value) * _MASS_IN_MCG[from_unit] / _MASS_IN_MCG[to_unit]


def unit_conversion_factor(unit: str, target_unit: str) -> Optional[Decimal]:
    """Multiplier taking a quantity in ``unit`` to ``target_unit``.

    Solid forms are interchangeable one for one, ``mL`` and ``L`` convert,
    and ``unit`` / ``actuation`` only match themselves.  Returns ``None``
    when the two units cannot describe the same quantity.
    """
    if unit == target_unit:
        return Decimal(1)
    if unit in SOLID_UNITS and target_unit in SOLID_UNITS:
        return Decimal(1)
    if unit in _VOLUME_IN_ML and target_unit in _VOLUME_IN_ML:
        return _VOLUME_IN_ML[unit] / _VOLUME_IN_ML[target_unit]
    if unit in _MASS_IN_MCG and target_unit in _MASS_IN_MCG:
        return _MASS_IN_MCG[unit] / _MASS_IN_MCG[target_unit]
    return None


def insulin_units_to_ml(units: Decimal, strength: int, places: int = 2) -> Decimal:
    """Volume in mL holding ``units`` of insulin at ``strength`` units/mL (U-100 → 100)."""
    if strength <= 0:
        raise ValueError(f"Insulin strength must be positive, got {strength}")
    volume = Decimal(units) / Decimal(strength)
    return volume.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
