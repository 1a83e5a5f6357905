"""Unit tests for quantity calculation and unit rounding."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from ndc_calc.core.config import QuantityConfig
from ndc_calc.exceptions import InvalidArgumentError
from ndc_calc.models import Concentration, DosageForm, ParsedSig
from ndc_calc.quantity.calculator import calculate_quantity
from ndc_calc.quantity.units import (
    convert_mass,
    insulin_units_to_ml,
    round_quantity,
    unit_category,
    unit_conversion_factor,
)


def _sig(dosage: str, frequency: int, unit: str = "tablet", **kwargs) -> ParsedSig:
    return ParsedSig(
        dosage_amount=Decimal(dosage),
        frequency_per_day=frequency,
        unit=unit,
        confidence=0.95,
        **kwargs,
    )


class TestScenarios:
    def test_tablets_three_times_daily(self, tablet_sig):
        result = calculate_quantity(tablet_sig, 30)
        assert result.total == Decimal("180")
        assert result.unit == "tablet"
        assert result.breakdown.effective_frequency == 3
        assert result.breakdown.days_supply == 30

    def test_fractional_dose_rounds_up(self):
        result = calculate_quantity(_sig("1.5", 1), 31)
        assert result.total == Decimal("47")

    def test_liquid_with_concentration(self):
        sig = _sig(
            "5",
            2,
            unit="mg",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("5"), volume_per_dose=Decimal("1")),
        )
        result = calculate_quantity(sig, 30)
        assert result.total == Decimal("60.00")
        assert result.unit == "mL"


class TestPrn:
    def test_as_needed_assumes_once_daily(self):
        result = calculate_quantity(_sig("2", 0), 30)
        assert result.total == Decimal("60")
        assert result.prn_assumed is True
        assert result.breakdown.effective_frequency == 1

    def test_prn_substitution_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ndc_calc.quantity.calculator"):
            calculate_quantity(_sig("1", 0), 10)
        assert "As-needed" in caplog.text

    def test_scheduled_sig_not_flagged(self, tablet_sig):
        assert calculate_quantity(tablet_sig, 30).prn_assumed is False


class TestRounding:
    def test_float_drift_does_not_overshoot(self):
        # 1.1 x 3 x 30 is exactly 99
        assert calculate_quantity(_sig("1.1", 3), 30).total == Decimal("99")

    @pytest.mark.parametrize(
        "total,unit,expected",
        [
            ("46.5", "tablet", "47"),
            ("46.01", "capsule", "47"),
            ("180", "tablet", "180"),
            ("12.345", "mL", "12.35"),
            ("12.344", "mL", "12.34"),
            ("0.125", "L", "0.13"),
            ("7.005", "mg", "7.01"),
            ("3.2", "actuation", "4"),
        ],
    )
    def test_round_quantity(self, total, unit, expected):
        assert round_quantity(Decimal(total), unit) == Decimal(expected)

    @pytest.mark.parametrize("value", ["1", "30", "180", "365"])
    def test_discrete_rounding_idempotent(self, value):
        once = round_quantity(Decimal(value), "tablet")
        assert once == Decimal(value)
        assert round_quantity(once, "tablet") == once

    @pytest.mark.parametrize(
        "unit,expected",
        [
            ("tablet", "discrete"),
            ("unit", "discrete"),
            ("mL", "volume"),
            ("L", "volume"),
            ("mg", "mass"),
            ("mcg", "mass"),
            ("scoop", "other"),
        ],
    )
    def test_unit_category(self, unit, expected):
        assert unit_category(unit) == expected


class TestMonotonicity:
    @pytest.mark.parametrize(
        "sig",
        [
            _sig("1", 2),
            _sig("1.5", 1),
            _sig("2.5", 3, unit="mL", dosage_form=DosageForm.LIQUID),
            _sig("1", 0),
        ],
    )
    def test_total_never_decreases_with_days(self, sig):
        totals = [calculate_quantity(sig, days).total for days in range(1, 91)]
        assert totals == sorted(totals)


class TestDosageForms:
    def test_liquid_without_concentration_keeps_unit(self):
        sig = _sig("5", 2, unit="mL", dosage_form=DosageForm.LIQUID)
        result = calculate_quantity(sig, 10)
        assert result.total == Decimal("100.00")
        assert result.unit == "mL"

    def test_liquid_dose_already_in_volume_ignores_concentration(self):
        sig = _sig(
            "5",
            1,
            unit="mL",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("250"), volume_per_dose=Decimal("5")),
        )
        assert calculate_quantity(sig, 10).total == Decimal("50.00")

    def test_liquid_concentration_per_five_ml(self):
        sig = _sig(
            "250",
            3,
            unit="mg",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("125"), volume_per_dose=Decimal("5")),
        )
        result = calculate_quantity(sig, 10)
        assert result.total == Decimal("300.00")
        assert result.unit == "mL"

    def test_microgram_dose_of_milligram_concentration(self):
        sig = _sig(
            "500",
            1,
            unit="mcg",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("1"), volume_per_dose=Decimal("1")),
        )
        result = calculate_quantity(sig, 30)
        assert result.total == Decimal("15.00")
        assert result.unit == "mL"

    def test_gram_dose_of_milligram_concentration(self):
        sig = _sig(
            "1",
            1,
            unit="g",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("250"), volume_per_dose=Decimal("5")),
        )
        assert calculate_quantity(sig, 10).total == Decimal("200.00")

    def test_concentration_ignored_for_non_mass_dose(self):
        sig = _sig(
            "1",
            2,
            unit="unit",
            dosage_form=DosageForm.LIQUID,
            concentration=Concentration(amount_per_dose=Decimal("250"), volume_per_dose=Decimal("5")),
        )
        result = calculate_quantity(sig, 30)
        assert result.total == Decimal("60")
        assert result.unit == "unit"

    def test_spoon_dose_end_to_end(self, interpreter):
        parsed = interpreter.interpret("Take 1 tsp by mouth twice daily of 250 mg/5 ml suspension")
        result = calculate_quantity(parsed, 30)
        assert result.total == Decimal("300.00")
        assert result.unit == "mL"

    def test_microgram_dose_end_to_end(self, interpreter):
        parsed = interpreter.interpret("Give 500 mcg by mouth once daily of 1 mg/ml solution")
        result = calculate_quantity(parsed, 30)
        assert result.total == Decimal("15.00")
        assert result.unit == "mL"

    def test_inhaler_canister_hint(self):
        sig = _sig("2", 2, unit="actuation", dosage_form=DosageForm.INHALER, inhaler_capacity=200)
        result = calculate_quantity(sig, 90)
        assert result.total == Decimal("360")
        assert result.unit == "actuation"
        assert result.canister_count == 2

    def test_inhaler_without_capacity(self):
        sig = _sig("2", 2, unit="actuation", dosage_form=DosageForm.INHALER)
        result = calculate_quantity(sig, 30)
        assert result.total == Decimal("120")
        assert result.canister_count is None

    def test_insulin_volume_hint(self):
        sig = _sig("10", 1, unit="unit", dosage_form=DosageForm.INSULIN, insulin_strength=100)
        result = calculate_quantity(sig, 30)
        assert result.total == Decimal("300")
        assert result.unit == "unit"
        assert result.insulin_volume_ml == Decimal("3.00")

    def test_insulin_defaults_to_u100(self):
        sig = _sig("10", 1, unit="unit", dosage_form=DosageForm.INSULIN)
        assert calculate_quantity(sig, 30).insulin_volume_ml == Decimal("3.00")

    def test_insulin_default_strength_configurable(self):
        sig = _sig("10", 1, unit="unit", dosage_form=DosageForm.INSULIN)
        config = QuantityConfig(default_insulin_strength=200)
        assert calculate_quantity(sig, 30, config=config).insulin_volume_ml == Decimal("1.50")

    def test_units_without_insulin_form_have_no_volume(self):
        sig = _sig("10", 1, unit="unit", dosage_form=DosageForm.OTHER)
        assert calculate_quantity(sig, 30).insulin_volume_ml is None

    def test_insulin_units_to_ml(self):
        assert insulin_units_to_ml(Decimal("250"), 100) == Decimal("2.50")
        with pytest.raises(ValueError):
            insulin_units_to_ml(Decimal("10"), 0)


class TestInvalidArguments:
    @pytest.mark.parametrize("days", [0, -5, 366])
    def test_days_out_of_range(self, tablet_sig, days):
        with pytest.raises(InvalidArgumentError) as exc_info:
            calculate_quantity(tablet_sig, days)
        assert exc_info.value.field == "days_supply"

    def test_configured_max_days(self, tablet_sig):
        config = QuantityConfig(max_days_supply=90)
        assert calculate_quantity(tablet_sig, 90, config=config).total == Decimal("540")
        with pytest.raises(InvalidArgumentError):
            calculate_quantity(tablet_sig, 91, config=config)

    def test_non_integer_days(self, tablet_sig):
        with pytest.raises(InvalidArgumentError):
            calculate_quantity(tablet_sig, 30.5)  # type: ignore[arg-type]

    def test_zero_dosage_bypassing_validation(self):
        sig = ParsedSig.model_construct(
            dosage_amount=Decimal(0), frequency_per_day=1, unit="tablet", confidence=0.9
        )
        with pytest.raises(InvalidArgumentError) as exc_info:
            calculate_quantity(sig, 30)
        assert exc_info.value.field == "dosage_amount"

    def test_negative_frequency_bypassing_validation(self):
        sig = ParsedSig.model_construct(
            dosage_amount=Decimal(1), frequency_per_day=-1, unit="tablet", confidence=0.9
        )
        with pytest.raises(InvalidArgumentError) as exc_info:
            calculate_quantity(sig, 30)
        assert exc_info.value.field == "frequency_per_day"

    def test_long_supply_logged(self, tablet_sig, caplog):
        with caplog.at_level(logging.WARNING, logger="ndc_calc.quantity.calculator"):
            calculate_quantity(tablet_sig, 200)
        assert "Long days' supply" in caplog.text


class TestUnitConversion:
    @pytest.mark.parametrize(
        "value,from_unit,to_unit,expected",
        [("500", "mcg", "mg", "0.5"), ("2", "g", "mg", "2000"), ("250", "mg", "g", "0.25"), ("5", "mg", "mg", "5")],
    )
    def test_convert_mass(self, value, from_unit, to_unit, expected):
        assert convert_mass(Decimal(value), from_unit, to_unit) == Decimal(expected)

    @pytest.mark.parametrize("from_unit,to_unit", [("tablet", "mg"), ("mg", "mL"), ("unit", "mg")])
    def test_convert_mass_rejects_other_units(self, from_unit, to_unit):
        assert convert_mass(Decimal("1"), from_unit, to_unit) is None

    @pytest.mark.parametrize(
        "unit,target,expected",
        [
            ("tablet", "tablet", "1"),
            ("capsule", "tablet", "1"),
            ("L", "mL", "1000"),
            ("mL", "L", "0.001"),
            ("g", "mg", "1000"),
            ("unit", "unit", "1"),
        ],
    )
    def test_compatible_units(self, unit, target, expected):
        assert unit_conversion_factor(unit, target) == Decimal(expected)

    @pytest.mark.parametrize(
        "unit,target",
        [("mL", "unit"), ("tablet", "mL"), ("actuation", "tablet"), ("unit", "actuation"), ("mg", "mL")],
    )
    def test_incompatible_units(self, unit, target):
        assert unit_conversion_factor(unit, target) is None
