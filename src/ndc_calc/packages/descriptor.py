"""Parse free-text package descriptors into a dispensable package size.

Handles the descriptor shapes found in drug catalogs::

    30 TABLET in 1 BOTTLE
    100mL in 1 BOTTLE
    3 x 30 TABLET in 1 PACKAGE
    30 TABLET, FILM COATED in 1 BOTTLE (0093-1234-56)
    2 BLISTER PACK in 1 CARTON / 10 TABLET in 1 BLISTER PACK
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

from ndc_calc.exceptions import DescriptorUnparseableError
from ndc_calc.sig.normalizers import resolve_unit

_NUMBER = r"(\d+(?:\.\d+)?)"

_TRAILING_CODE = re.compile(r"\s*\([^)]*\)\s*$")
_NESTED_SEPARATOR = re.compile(r"\s+/\s+")
_OUTER_COUNT = re.compile(r"^(\d+)\s+[a-z]", re.IGNORECASE)
_MULTI_PACK = re.compile(r"^(\d+)\s*x\s*" + _NUMBER + r"\s*([a-z]+)", re.IGNORECASE)
_QUANTITY_IN_CONTAINER = re.compile(
    r"^" + _NUMBER + r"\s*([a-z]+)(?:\s*,\s*[a-z][a-z\s,-]*?)?(?:\s+in\s+\d+\s+[a-z][a-z\s,]*)?$",
    re.IGNORECASE,
)
_LEADING_QUANTITY = re.compile(r"^" + _NUMBER + r"\s*([a-z]+)", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedPackage:
    """Quantity held by one dispensable package.

    ``total_quantity`` is ``quantity * package_count`` and is what the
    selector treats as the package size.
    """

    quantity: Decimal
    unit: str
    package_count: int = 1
    total_quantity: Decimal = Decimal(0)


def parse_package_descriptor(text: str) -> ParsedPackage:
    """Parse ``text`` into a ``ParsedPackage``.

    Raises:
        DescriptorUnparseableError: no pattern yields a positive quantity.
    """
    cleaned = _TRAILING_CODE.sub("", (text or "").strip()).strip()
    if not cleaned:
        raise DescriptorUnparseableError(text or "")

    segments = _NESTED_SEPARATOR.split(cleaned)
    inner = _parse_segment(segments[-1])
    if inner is None:
        raise DescriptorUnparseableError(text)

    # Outer layers ("2 BLISTER PACK in 1 CARTON") multiply the inner contents
    outer_count = 1
    for outer in segments[:-1]:
        found = _OUTER_COUNT.match(outer)
        if found and int(found.group(1)) > 1:
            outer_count *= int(found.group(1))

    if outer_count > 1:
        count = inner.package_count * outer_count
        inner = ParsedPackage(
            quantity=inner.quantity,
            unit=inner.unit,
            package_count=count,
            total_quantity=inner.quantity * count,
        )

    if inner.total_quantity <= 0:
        raise DescriptorUnparseableError(text)
    return inner


def _parse_segment(segment: str) -> ParsedPackage | None:
    segment = _TRAILING_CODE.sub("", segment).strip()

    found = _MULTI_PACK.match(segment)
    if found:
        count = int(found.group(1))
        quantity = Decimal(found.group(2))
        return ParsedPackage(
            quantity=quantity,
            unit=_unit(found.group(3)),
            package_count=count,
            total_quantity=quantity * count,
        )

    found = _QUANTITY_IN_CONTAINER.match(segment) or _LEADING_QUANTITY.match(segment)
    if found:
        quantity = Decimal(found.group(1))
        return ParsedPackage(quantity=quantity, unit=_unit(found.group(2)), total_quantity=quantity)

    return None


def _unit(token: str) -> str:
    return resolve_unit(token) or token.upper()
