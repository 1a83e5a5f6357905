"""Package descriptors, catalog building and package selection."""

from __future__ import annotations

from ndc_calc.packages.catalog import CatalogBuildResult, build_catalog
from ndc_calc.packages.descriptor import ParsedPackage, parse_package_descriptor
from ndc_calc.packages.selector import rank_packages, ranking_key, select_packages

__all__ = [
    "CatalogBuildResult",
    "ParsedPackage",
    "build_catalog",
    "parse_package_descriptor",
    "rank_packages",
    "ranking_key",
    "select_packages",
]
