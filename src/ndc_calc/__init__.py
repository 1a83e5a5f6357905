"""ndc-calc: prescription instructions to dispensed quantity and package choice.

Usage::

    from ndc_calc import parse_sig, calculate_quantity, recommend

    parsed = parse_sig("Take 1 tablet by mouth twice daily")
    result = calculate_quantity(parsed, days_supply=30)
"""

from __future__ import annotations

from ndc_calc.core.config import AppSettings
from ndc_calc.exceptions import (
    DescriptorUnparseableError,
    InvalidArgumentError,
    NdcCalcError,
    NoPackagesAvailableError,
    NotParseableError,
)
from ndc_calc.models import (
    CatalogRecord,
    Concentration,
    DispensingRecommendation,
    DispensingWarning,
    DosageForm,
    NdcInfo,
    NdcSelection,
    ParsedSig,
    QuantityBreakdown,
    QuantityResult,
    WarningKind,
    WarningSeverity,
)
from ndc_calc.packages import build_catalog, parse_package_descriptor, rank_packages, select_packages
from ndc_calc.pipeline import recommend
from ndc_calc.quantity import calculate_quantity
from ndc_calc.sig import SigInterpreter, parse_sig
from ndc_calc.warnings import generate_warnings, inactive_package_warnings

__all__ = [
    "AppSettings",
    # Errors
    "NdcCalcError",
    "NotParseableError",
    "InvalidArgumentError",
    "NoPackagesAvailableError",
    "DescriptorUnparseableError",
    # Models
    "CatalogRecord",
    "Concentration",
    "DispensingRecommendation",
    "DispensingWarning",
    "DosageForm",
    "NdcInfo",
    "NdcSelection",
    "ParsedSig",
    "QuantityBreakdown",
    "QuantityResult",
    "WarningKind",
    "WarningSeverity",
    # Operations
    "SigInterpreter",
    "parse_sig",
    "calculate_quantity",
    "parse_package_descriptor",
    "build_catalog",
    "select_packages",
    "rank_packages",
    "generate_warnings",
    "inactive_package_warnings",
    "recommend",
]
