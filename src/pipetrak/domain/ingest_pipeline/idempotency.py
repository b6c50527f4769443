"""Insert-or-skip wrapper that makes every write phase safe to re-run."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pipetrak.domain.errors import PipetrakError
from pipetrak.domain.model import Entity

if TYPE_CHECKING:
    from collections.abc import Hashable, Sequence
    from uuid import UUID

    from pipetrak.domain.ports.persistence import NaturalKeyRepository

log = getLogger(__name__)


class IdempotencyError(PipetrakError):
    """Raised when the store neither kept nor rejected-as-duplicate a record."""


@dataclass(frozen=True, slots=True)
class GuardOutcome[TKey: Hashable]:
    """Identifiers for every requested key plus which keys this call created."""

    ids: dict[TKey, UUID] = field(default_factory=dict)
    created: tuple[TKey, ...] = ()
    skipped: tuple[TKey, ...] = ()


class IdempotencyGuard:
    """Check natural keys before inserting and let the uniqueness constraint decide races.

    A key is reported as created only when the identifier read back after the
    insert is the one this call generated; anything else was already present,
    either before the call or inserted concurrently by another import.
    """

    def write[TEntity: Entity, TKey: Hashable](
        self,
        repository: NaturalKeyRepository[TEntity, TKey],
        *,
        project_id: UUID,
        entities: Sequence[TEntity],
    ) -> GuardOutcome[TKey]:
        keyed: dict[TKey, TEntity] = {}
        for entity in entities:
            keyed.setdefault(repository.natural_key(entity), entity)
        if not keyed:
            return GuardOutcome()

        existing = repository.find_ids(project_id, keyed.keys())
        missing = [entity for key, entity in keyed.items() if key not in existing]
        if missing:
            repository.insert_or_skip(missing)
        resolved = repository.find_ids(project_id, keyed.keys()) if missing else existing

        unresolved = [key for key in keyed if key not in resolved]
        if unresolved:
            raise IdempotencyError(
                f"{len(unresolved)} record(s) missing after insert-or-skip, e.g. {unresolved[0]!r}"
            )

        created = tuple(key for key, entity in keyed.items() if resolved[key] == entity.id)
        created_keys = set(created)
        skipped = tuple(key for key in keyed if key not in created_keys)
        if skipped:
            log.debug("Skipped %s already-present record(s)", len(skipped))
        return GuardOutcome(ids=dict(resolved), created=created, skipped=skipped)
