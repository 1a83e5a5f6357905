"""Advisory warnings for package recommendations."""

from __future__ import annotations

from ndc_calc.warnings.generator import (
    generate_warnings,
    inactive_package_warnings,
    resolve_catalog_form,
)

__all__ = ["generate_warnings", "inactive_package_warnings", "resolve_catalog_form"]
