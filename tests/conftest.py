"""Shared fixtures for ndc-calc tests."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from ndc_calc.core.config import AppSettings
from ndc_calc.models import CatalogRecord, DosageForm, NdcInfo, ParsedSig
from ndc_calc.sig.interpreter import SigInterpreter


@pytest.fixture
def settings() -> AppSettings:
    """Default settings with plain-text logs."""
    return AppSettings()


@pytest.fixture
def interpreter() -> SigInterpreter:
    return SigInterpreter()


@pytest.fixture
def tablet_sig() -> ParsedSig:
    """2 tablets three times daily."""
    return ParsedSig(
        dosage_amount=Decimal("2"),
        frequency_per_day=3,
        unit="tablet",
        confidence=0.95,
        dosage_form=DosageForm.TABLET,
    )


@pytest.fixture
def catalog_records() -> list[CatalogRecord]:
    """Four tablet packages, one of them inactive."""
    return [
        CatalogRecord(
            code="0093-0001-60",
            descriptor="60 TABLET in 1 BOTTLE",
            manufacturer="Teva",
            dosage_form="TABLET",
        ),
        CatalogRecord(
            code="0093-0001-90",
            descriptor="90 TABLET in 1 BOTTLE (0093-0001-90)",
            manufacturer="Teva",
            dosage_form="TABLET",
        ),
        CatalogRecord(
            code="68180-0002-01",
            descriptor="100 TABLET, FILM COATED in 1 BOTTLE",
            manufacturer="Lupin",
            dosage_form="TABLET, FILM COATED",
        ),
        CatalogRecord(
            code="68180-0002-18",
            descriptor="180 TABLET in 1 BOTTLE",
            manufacturer="Lupin",
            dosage_form="TABLET",
            active=False,
        ),
    ]


@pytest.fixture
def make_entry():
    """Factory for ``NdcInfo`` entries with sensible defaults."""

    def _make(
        code: str,
        size: str | int,
        *,
        active: bool = True,
        dosage_form: str = "TABLET",
        package_unit: str = "tablet",
    ) -> NdcInfo:
        return NdcInfo(
            code=code,
            package_size=Decimal(str(size)),
            descriptor=f"{size} {package_unit.upper() or 'TABLET'} in 1 BOTTLE",
            dosage_form=dosage_form,
            active=active,
            package_unit=package_unit,
        )

    return _make


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    pkg_level = logging.getLogger("ndc_calc").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("ndc_calc").setLevel(pkg_level)
