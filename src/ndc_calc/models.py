"""Pydantic data models for ndc-calc.

Quantities are ``Decimal`` so that unit-aware rounding is exact; confidence is
a plain ``float``.  All records are request-scoped and never persisted.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

# ── Enums ────────────────────────────────────────────────────────────


class DosageForm(str, Enum):
    """Dosage forms with distinct quantity semantics."""

    TABLET = "tablet"
    CAPSULE = "capsule"
    LIQUID = "liquid"
    INSULIN = "insulin"
    INHALER = "inhaler"
    OTHER = "other"


class WarningKind(str, Enum):
    """Kinds of advisory messages attached to a recommendation."""

    OVERFILL = "overfill"
    UNDERFILL = "underfill"
    DOSAGE_FORM_MISMATCH = "dosage_form_mismatch"
    LOW_CONFIDENCE_PARSE = "low_confidence_parse"
    INACTIVE_PACKAGE = "inactive_package"


class WarningSeverity(str, Enum):
    """Severity of an advisory message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# ── SIG / quantity models ────────────────────────────────────────────


class Concentration(BaseModel):
    """Liquid strength, e.g. 10 mg per 5 mL."""

    model_config = {"frozen": True}

    amount_per_dose: Decimal = Field(gt=0)
    dose_unit: str = "mg"
    volume_per_dose: Decimal = Field(gt=0)
    volume_unit: str = "mL"


class ParsedSig(BaseModel):
    """Structured dosing data interpreted from a SIG.

    ``frequency_per_day == 0`` means as-needed (PRN).
    """

    model_config = {"frozen": True}

    dosage_amount: Decimal = Field(gt=0)
    frequency_per_day: int = Field(ge=0)
    unit: str
    confidence: float = Field(ge=0.0, le=1.0)
    dosage_form: Optional[DosageForm] = None
    concentration: Optional[Concentration] = None
    inhaler_capacity: Optional[int] = Field(default=None, gt=0)
    insulin_strength: Optional[int] = Field(default=None, gt=0)
    rule_name: str = ""


class QuantityBreakdown(BaseModel):
    """Inputs actually used for the total, including the PRN substitution."""

    model_config = {"frozen": True}

    dosage_amount: Decimal
    effective_frequency: int
    days_supply: int


class QuantityResult(BaseModel):
    """Total quantity required for the days' supply."""

    model_config = {"frozen": True}

    total: Decimal = Field(ge=0)
    unit: str
    breakdown: QuantityBreakdown
    prn_assumed: bool = False
    # Hints for downstream selection / display, never part of ``total``
    canister_count: Optional[int] = None
    insulin_volume_ml: Optional[Decimal] = None


# ── Catalog / selection models ───────────────────────────────────────


class CatalogRecord(BaseModel):
    """Raw package entry as supplied by an external drug/package lookup."""

    code: str
    descriptor: str = ""
    manufacturer: str = ""
    dosage_form: str = ""
    active: bool = True
    package_size: Optional[Decimal] = None


class NdcInfo(BaseModel):
    """Catalog entry with a parsed, positive package size."""

    code: str
    package_size: Decimal = Field(gt=0)
    descriptor: str = ""
    manufacturer: str = ""
    dosage_form: str = ""
    active: bool = True
    package_unit: str = ""


class NdcSelection(BaseModel):
    """A package choice that satisfies the target quantity.

    Sizes and totals are in ``unit``, the unit the target was given in.
    """

    code: str
    package_size: Decimal
    repeat_count: int = Field(ge=1)
    total_quantity: Decimal
    overfill: Decimal = Decimal(0)
    # Zero under the ceiling policy
    underfill: Decimal = Decimal(0)
    unit: str = ""
    preferred: bool = False
    descriptor: str = ""
    manufacturer: str = ""


class DispensingWarning(BaseModel):
    """Advisory message; never fatal."""

    kind: WarningKind
    message: str
    severity: WarningSeverity = WarningSeverity.WARNING
    code: str = ""


class DispensingRecommendation(BaseModel):
    """End-to-end result of interpreting a SIG against a catalog."""

    parsed_sig: ParsedSig
    quantity: QuantityResult
    recommended: NdcSelection
    alternatives: list[NdcSelection] = Field(default_factory=list)
    warnings: list[DispensingWarning] = Field(default_factory=list)
    inactive_codes: list[str] = Field(default_factory=list)
    skipped_descriptors: int = 0
