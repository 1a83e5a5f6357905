"""Choose and rank package options that cover a target quantity.

Each active entry is dispensed ``ceil(target / package_size)`` times, so a
selection never falls short of the target.  Options are ranked by:

1. preferred code first, when one is given
2. overfill, ascending (least waste first)
3. repeat count, ascending (fewest packages)
4. package size, descending (prefer the larger package)
5. code, ascending (deterministic final tie-break)

When ``target_unit`` is given, entries counted in a recognised unit that
cannot describe it are dropped (mL vials for an insulin dose in units), and
sizes are converted into it (``1 L`` becomes ``1000 mL``).  Entries whose
package unit is missing or unrecognised (``AEROSOL``, ``KIT``) are kept as
they are.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from decimal import ROUND_CEILING, Decimal
from typing import Optional

from ndc_calc.exceptions import InvalidArgumentError, NoPackagesAvailableError
from ndc_calc.models import NdcInfo, NdcSelection
from ndc_calc.quantity.units import unit_category, unit_conversion_factor

log = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 5

_CODE_SEPARATORS = re.compile(r"[\s-]+")


def select_packages(
    catalog: Iterable[NdcInfo],
    target: Decimal,
    *,
    target_unit: Optional[str] = None,
    preferred_code: Optional[str] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[NdcSelection]:
    """Ranked selections for ``target``; the first element is the recommendation.

    Raises:
        InvalidArgumentError: ``target`` or ``max_results`` is not positive.
        NoPackagesAvailableError: no active, unit-compatible entry with a
            positive size.
    """
    ranked = rank_packages(
        catalog,
        target,
        target_unit=target_unit,
        preferred_code=preferred_code,
        max_results=max_results,
    )
    return [selection for selection, _ in ranked]


def rank_packages(
    catalog: Iterable[NdcInfo],
    target: Decimal,
    *,
    target_unit: Optional[str] = None,
    preferred_code: Optional[str] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[tuple[NdcSelection, NdcInfo]]:
    """Like ``select_packages`` but pairs each selection with its catalog entry."""
    target = Decimal(target)
    if target <= 0:
        raise InvalidArgumentError("target", target, "must be positive")
    if max_results < 1:
        raise InvalidArgumentError("max_results", max_results, "must be at least 1")

    preferred = normalize_code(preferred_code) if preferred_code else ""
    ranked: list[tuple[NdcSelection, NdcInfo]] = []
    inactive: list[str] = []
    incompatible: list[str] = []
    for entry in catalog:
        if not entry.active:
            log.debug("Ignoring inactive package %s", entry.code)
            inactive.append(entry.code)
            continue
        if entry.package_size is None or entry.package_size <= 0:
            log.debug("Ignoring package %s with size %s", entry.code, entry.package_size)
            continue
        factor = Decimal(1)
        if target_unit and unit_category(entry.package_unit) != "other":
            factor = unit_conversion_factor(entry.package_unit, target_unit)
            if factor is None:
                log.debug("Ignoring package %s: %s does not match %s", entry.code, entry.package_unit, target_unit)
                incompatible.append(entry.code)
                continue
        is_preferred = bool(preferred) and normalize_code(entry.code) == preferred
        selection = _selection_for(entry, target, factor, target_unit or entry.package_unit, is_preferred)
        ranked.append((selection, entry))

    if not ranked:
        if incompatible:
            raise NoPackagesAvailableError(
                f"No active package is dispensed in a unit compatible with {target_unit}.",
                inactive_codes=inactive,
            )
        raise NoPackagesAvailableError(inactive_codes=inactive)

    if preferred and not any(selection.preferred for selection, _ in ranked):
        log.info("Preferred package %s is not among %d candidates", preferred_code, len(ranked))

    ranked.sort(key=lambda pair: ranking_key(pair[0]))
    best = ranked[0][0]
    log.debug(
        "Selected %s x%d (overfill=%s) from %d candidates",
        best.code, best.repeat_count, best.overfill, len(ranked),
    )
    return ranked[:max_results]


def ranking_key(selection: NdcSelection) -> tuple[bool, Decimal, int, Decimal, str]:
    return (
        not selection.preferred,
        selection.overfill,
        selection.repeat_count,
        -selection.package_size,
        selection.code,
    )


def normalize_code(code: str) -> str:
    """Package code without hyphens or spaces, for comparison only."""
    return _CODE_SEPARATORS.sub("", code).upper()


def _selection_for(
    entry: NdcInfo, target: Decimal, factor: Decimal, unit: str, preferred: bool
) -> NdcSelection:
    size = entry.package_size * factor
    repeat_count = int((target / size).to_integral_value(rounding=ROUND_CEILING))
    repeat_count = max(repeat_count, 1)
    total = size * repeat_count
    return NdcSelection(
        code=entry.code,
        package_size=size,
        repeat_count=repeat_count,
        total_quantity=total,
        overfill=max(Decimal(0), total - target),
        underfill=max(Decimal(0), target - total),
        unit=unit,
        preferred=preferred,
        descriptor=entry.descriptor,
        manufacturer=entry.manufacturer,
    )
