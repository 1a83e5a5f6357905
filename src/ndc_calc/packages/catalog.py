"""Turn raw catalog records into ``NdcInfo`` entries with parsed package sizes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ndc_calc.exceptions import DescriptorUnparseableError
from ndc_calc.models import CatalogRecord, NdcInfo
from ndc_calc.packages.descriptor import parse_package_descriptor

log = logging.getLogger(__name__)


@dataclass
class CatalogBuildResult:
    """Parsed entries plus the codes of records that had to be dropped."""

    entries: list[NdcInfo] = field(default_factory=list)
    skipped_codes: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_codes)

    @property
    def active_entries(self) -> list[NdcInfo]:
        return [entry for entry in self.entries if entry.active]

    @property
    def inactive_codes(self) -> list[str]:
        return [entry.code for entry in self.entries if not entry.active]


def build_catalog(records: Iterable[CatalogRecord | dict]) -> CatalogBuildResult:
    """Parse each record's descriptor; one bad record never aborts the batch.

    When a descriptor cannot be parsed the record's own positive
    ``package_size`` is used instead; without one the record is skipped.

    The size of a multi-pack is its whole content (``3 x 30`` is 90), not
    the size of one inner pack, because the code names the outer package.
    """
    result = CatalogBuildResult()
    for raw in records:
        record = raw if isinstance(raw, CatalogRecord) else CatalogRecord.model_validate(raw)
        try:
            parsed = parse_package_descriptor(record.descriptor)
        except DescriptorUnparseableError:
            if record.package_size is not None and record.package_size > 0:
                log.debug("Descriptor unparseable for %s, using package_size=%s", record.code, record.package_size)
                size, unit = record.package_size, ""
            else:
                log.warning("Skipping %s: unparseable package descriptor %r", record.code, record.descriptor)
                result.skipped_codes.append(record.code)
                continue
        else:
            size, unit = parsed.total_quantity, parsed.unit

        result.entries.append(
            NdcInfo(
                code=record.code,
                package_size=size,
                descriptor=record.descriptor,
                manufacturer=record.manufacturer,
                dosage_form=record.dosage_form,
                active=record.active,
                package_unit=unit,
            )
        )

    log.debug("Catalog built: %d entries, %d skipped", len(result.entries), result.skipped)
    return result
