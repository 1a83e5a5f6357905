"""Advisory warnings for a chosen package.

Warnings are informational only.  Each rule runs independently; a failure in
one rule is logged and does not block the others, and ``generate_warnings``
never raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ndc_calc.core.config import WarningConfig
from ndc_calc.models import (
    DispensingWarning,
    DosageForm,
    NdcInfo,
    NdcSelection,
    ParsedSig,
    WarningKind,
    WarningSeverity,
)

log = logging.getLogger(__name__)

# Catalog dosage-form keywords, matched as whole words in order
CATALOG_FORM_KEYWORDS: tuple[tuple[str, DosageForm], ...] = (
    ("TABLET", DosageForm.TABLET),
    ("PILL", DosageForm.TABLET),
    ("CAPSULE", DosageForm.CAPSULE),
    ("AEROSOL", DosageForm.INHALER),
    ("INHALATION", DosageForm.INHALER),
    ("INHALER", DosageForm.INHALER),
    ("SPRAY", DosageForm.INHALER),
    ("INJECTION", DosageForm.INSULIN),
    ("VIAL", DosageForm.INSULIN),
    ("PEN", DosageForm.INSULIN),
    ("SOLUTION", DosageForm.LIQUID),
    ("SUSPENSION", DosageForm.LIQUID),
    ("SYRUP", DosageForm.LIQUID),
    ("ELIXIR", DosageForm.LIQUID),
    ("LIQUID", DosageForm.LIQUID),
)

_CENT = Decimal("0.01")

WarningRule = Callable[[NdcSelection, Decimal, ParsedSig, NdcInfo, WarningConfig], Optional[DispensingWarning]]


def resolve_catalog_form(dosage_form: str) -> Optional[DosageForm]:
    """Map catalog wording ("TABLET, FILM COATED") onto a ``DosageForm``."""
    text = (dosage_form or "").upper()
    if not text.strip():
        return None
    for keyword, form in CATALOG_FORM_KEYWORDS:
        if re.search(rf"\b{keyword}S?\b", text):
            return form
    return None


def generate_warnings(
    selection: NdcSelection,
    target: Decimal,
    parsed_sig: ParsedSig,
    ndc_info: NdcInfo,
    *,
    config: Optional[WarningConfig] = None,
) -> list[DispensingWarning]:
    """Run every warning rule against the chosen package."""
    config = config or WarningConfig()
    warnings: list[DispensingWarning] = []
    for rule in _RULES:
        try:
            warning = rule(selection, Decimal(target), parsed_sig, ndc_info, config)
        except Exception:
            log.exception("Warning rule %s failed for %s", rule.__name__, selection.code)
            continue
        if warning is not None:
            warnings.append(warning)
    return warnings


def inactive_package_warnings(entries: Iterable[NdcInfo]) -> list[DispensingWarning]:
    """One error-level notice per inactive catalog entry."""
    return [
        DispensingWarning(
            kind=WarningKind.INACTIVE_PACKAGE,
            severity=WarningSeverity.ERROR,
            message=f"Package {entry.code} is inactive and should not be dispensed",
            code=entry.code,
        )
        for entry in entries
        if not entry.active
    ]


# ── Rules ────────────────────────────────────────────────────────────


def _check_overfill(
    selection: NdcSelection,
    target: Decimal,
    parsed_sig: ParsedSig,
    ndc_info: NdcInfo,
    config: WarningConfig,
) -> Optional[DispensingWarning]:
    overfill = selection.overfill.quantize(_CENT, rounding=ROUND_HALF_UP)
    if overfill <= 0:
        return None
    percent = overfill / target * 100
    severity = (
        WarningSeverity.WARNING
        if percent > Decimal(str(config.overfill_escalation_percent))
        else WarningSeverity.INFO
    )
    unit = selection.unit or ndc_info.package_unit or "units"
    return DispensingWarning(
        kind=WarningKind.OVERFILL,
        severity=severity,
        message=(
            f"Recommended package results in {percent:.1f}% waste "
            f"({overfill.normalize():f} {unit} excess)"
        ),
        code=selection.code,
    )


def _check_underfill(
    selection: NdcSelection,
    target: Decimal,
    parsed_sig: ParsedSig,
    ndc_info: NdcInfo,
    config: WarningConfig,
) -> Optional[DispensingWarning]:
    if selection.underfill <= 0:
        return None
    return DispensingWarning(
        kind=WarningKind.UNDERFILL,
        message=f"Recommended package falls {selection.underfill.normalize():f} short of the required quantity",
        code=selection.code,
    )


def _check_dosage_form(
    selection: NdcSelection,
    target: Decimal,
    parsed_sig: ParsedSig,
    ndc_info: NdcInfo,
    config: WarningConfig,
) -> Optional[DispensingWarning]:
    expected = parsed_sig.dosage_form
    if expected is None or expected == DosageForm.OTHER:
        return None
    actual = resolve_catalog_form(ndc_info.dosage_form)
    if actual is None or actual == expected:
        return None
    return DispensingWarning(
        kind=WarningKind.DOSAGE_FORM_MISMATCH,
        message=(
            f"Instructions describe a {expected.value} but package {ndc_info.code} "
            f"is {ndc_info.dosage_form}. Please verify."
        ),
        code=selection.code,
    )


def _check_confidence(
    selection: NdcSelection,
    target: Decimal,
    parsed_sig: ParsedSig,
    ndc_info: NdcInfo,
    config: WarningConfig,
) -> Optional[DispensingWarning]:
    if parsed_sig.confidence >= config.low_confidence_threshold:
        return None
    return DispensingWarning(
        kind=WarningKind.LOW_CONFIDENCE_PARSE,
        message=(
            f"Instructions were interpreted with low confidence ({parsed_sig.confidence:.2f}). "
            "Please verify the calculated quantity."
        ),
    )


_RULES: tuple[WarningRule, ...] = (
    _check_overfill,
    _check_underfill,
    _check_dosage_form,
    _check_confidence,
)
