"""End-to-end recommendation: SIG text + days' supply + catalog → packages.

Steps:
1. Build the catalog (unparseable descriptors are skipped and counted)
2. Fail fast when no active package remains
3. Interpret the SIG and calculate the required quantity
4. Rank unit-compatible packages against that quantity
5. Attach warnings for the recommended package and inactive entries
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from ndc_calc.core.config import AppSettings
from ndc_calc.exceptions import NoPackagesAvailableError
from ndc_calc.models import CatalogRecord, DispensingRecommendation, NdcInfo, QuantityResult
from ndc_calc.packages.catalog import build_catalog
from ndc_calc.packages.selector import rank_packages
from ndc_calc.quantity.calculator import calculate_quantity
from ndc_calc.quantity.units import unit_conversion_factor
from ndc_calc.sig.interpreter import SigInterpreter
from ndc_calc.warnings.generator import generate_warnings, inactive_package_warnings

log = logging.getLogger(__name__)


def recommend(
    sig_text: str,
    days_supply: int,
    records: Iterable[CatalogRecord | dict],
    *,
    settings: Optional[AppSettings] = None,
    interpreter: Optional[SigInterpreter] = None,
    preferred_code: Optional[str] = None,
) -> DispensingRecommendation:
    """Recommend packages that cover ``days_supply`` days of ``sig_text``.

    ``preferred_code`` ranks that package first whenever it is a candidate.

    Raises:
        NoPackagesAvailableError: the catalog is empty, entirely inactive, or
            has no package in a compatible unit.
        NotParseableError: no SIG rule matches.
        InvalidArgumentError: days supply out of range.
    """
    settings = settings or AppSettings()
    interpreter = interpreter or SigInterpreter()

    catalog = build_catalog(records)
    if not catalog.entries:
        raise NoPackagesAvailableError("No packages found for this drug.")
    active = catalog.active_entries
    if not active:
        raise NoPackagesAvailableError(inactive_codes=catalog.inactive_codes)

    parsed_sig = interpreter.interpret(sig_text)
    quantity = calculate_quantity(parsed_sig, days_supply, config=settings.quantity)
    if quantity.prn_assumed:
        log.info("Quantity for %r assumes one dose per day", sig_text)

    target, target_unit = _selection_target(quantity, active)
    ranked = rank_packages(
        active,
        target,
        target_unit=target_unit,
        preferred_code=preferred_code,
        max_results=settings.selection.max_results,
    )
    recommended, recommended_entry = ranked[0]

    warnings = generate_warnings(
        recommended,
        target,
        parsed_sig,
        recommended_entry,
        config=settings.warnings,
    )
    warnings.extend(inactive_package_warnings(catalog.entries))

    log.debug(
        "Recommended %s x%d for %s %s (%d warnings)",
        recommended.code, recommended.repeat_count, target, target_unit, len(warnings),
    )
    return DispensingRecommendation(
        parsed_sig=parsed_sig,
        quantity=quantity,
        recommended=recommended,
        alternatives=[selection for selection, _ in ranked[1:]],
        warnings=warnings,
        inactive_codes=catalog.inactive_codes,
        skipped_descriptors=catalog.skipped,
    )


def _selection_target(quantity: QuantityResult, entries: list[NdcInfo]) -> tuple[Decimal, str]:
    """Insulin is matched by volume unless some package is counted in units."""
    if quantity.insulin_volume_ml is not None and quantity.insulin_volume_ml > 0:
        counted_in_units = any(
            unit_conversion_factor(entry.package_unit, quantity.unit) is not None
            for entry in entries
            if entry.package_unit
        )
        if not counted_in_units:
            return quantity.insulin_volume_ml, "mL"
    return quantity.total, quantity.unit
