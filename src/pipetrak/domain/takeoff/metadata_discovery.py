"""Find the areas, systems and test packages an import refers to by name."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pipetrak.domain.model import MetadataType
from pipetrak.domain.takeoff.types import MetadataDiscoveryItem

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from pipetrak.domain.ports.persistence import ReferenceLookup
    from pipetrak.domain.takeoff.types import TakeoffRow

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MetadataDiscoveryResult:
    items: dict[MetadataType, tuple[MetadataDiscoveryItem, ...]] = field(
        default_factory=dict[MetadataType, tuple[MetadataDiscoveryItem, ...]]
    )

    def for_type(self, metadata_type: MetadataType) -> tuple[MetadataDiscoveryItem, ...]:
        return self.items.get(metadata_type, ())

    @property
    def total_count(self) -> int:
        return sum(len(items) for items in self.items.values())

    @property
    def existing_count(self) -> int:
        return sum(1 for items in self.items.values() for item in items if item.exists)

    @property
    def will_create_count(self) -> int:
        return self.total_count - self.existing_count

    def names_to_create(self, metadata_type: MetadataType) -> list[str]:
        return [item.value for item in self.for_type(metadata_type) if not item.exists]

    def to_payload(self) -> dict[str, Any]:
        return {
            "areas": [item.to_payload() for item in self.for_type(MetadataType.AREA)],
            "systems": [item.to_payload() for item in self.for_type(MetadataType.SYSTEM)],
            "testPackages": [
                item.to_payload() for item in self.for_type(MetadataType.TEST_PACKAGE)
            ],
            "totalCount": self.total_count,
            "existingCount": self.existing_count,
            "willCreateCount": self.will_create_count,
        }


def referenced_names(rows: Iterable[TakeoffRow]) -> dict[MetadataType, list[str]]:
    """Sorted distinct non-empty names per reference type."""

    names: dict[MetadataType, set[str]] = {metadata_type: set() for metadata_type in MetadataType}
    for row in rows:
        for metadata_type in MetadataType:
            value = row.reference(metadata_type)
            if value:
                names[metadata_type].add(value)
    return {metadata_type: sorted(values) for metadata_type, values in names.items()}


def discover_metadata(
    rows: Iterable[TakeoffRow],
    *,
    references: ReferenceLookup,
    project_id: UUID,
) -> MetadataDiscoveryResult:
    """Existence-check referenced names with one lookup per reference type. Read-only."""

    items: dict[MetadataType, tuple[MetadataDiscoveryItem, ...]] = {}
    for metadata_type, names in referenced_names(rows).items():
        existing: dict[str, UUID] = {}
        if names:
            existing = references.find_reference_ids(project_id, metadata_type, names)
        items[metadata_type] = tuple(
            MetadataDiscoveryItem(
                type=metadata_type,
                value=name,
                exists=name in existing,
                record_id=existing.get(name),
            )
            for name in names
        )
    result = MetadataDiscoveryResult(items=items)
    log.info(
        "Discovered %s metadata references: existing=%s, will_create=%s",
        result.total_count,
        result.existing_count,
        result.will_create_count,
    )
    return result
