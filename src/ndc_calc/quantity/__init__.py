"""Quantity calculation and unit rounding."""

from __future__ import annotations

from ndc_calc.quantity.calculator import calculate_quantity
from ndc_calc.quantity.units import round_quantity, unit_category

__all__ = ["calculate_quantity", "round_quantity", "unit_category"]
