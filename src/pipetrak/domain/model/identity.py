"""Structured natural keys for components, one variant per component type.

Every variant knows its payload shape (stored alongside the component), a
canonical token used by the storage uniqueness constraint, and a compact label
used in human-facing messages. Callers dispatch on the component type through
:func:`build_identity_key` and :func:`identity_key_from_payload` rather than
inspecting payload dictionaries.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from pipetrak.domain.model.enums import ComponentType

if TYPE_CHECKING:
    from collections.abc import Mapping

type IdentityPayload = dict[str, str | int]

AGGREGATE_SUFFIX: Final[str] = "AGG"


class IdentityKeyError(ValueError):
    """Raised when a stored identity payload does not match its component type."""


def _token(payload: IdentityPayload) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class SpoolKey:
    COMPONENT_TYPES: ClassVar[frozenset[ComponentType]] = frozenset({ComponentType.SPOOL})

    spool_id: str

    def to_payload(self) -> IdentityPayload:
        return {"spool_id": self.spool_id}

    def token(self) -> str:
        return _token(self.to_payload())

    def label(self) -> str:
        return self.spool_id


@dataclass(frozen=True, slots=True)
class WeldKey:
    COMPONENT_TYPES: ClassVar[frozenset[ComponentType]] = frozenset({ComponentType.FIELD_WELD})

    drawing_norm: str
    weld_number: str

    def to_payload(self) -> IdentityPayload:
        return {"drawing_norm": self.drawing_norm, "weld_number": self.weld_number}

    def token(self) -> str:
        return _token(self.to_payload())

    def label(self) -> str:
        return f"{self.drawing_norm}-{self.weld_number}"


@dataclass(frozen=True, slots=True)
class ThreadedPipeKey:
    """Aggregate key: all threaded pipe lines with the same drawing/size/code share it."""

    COMPONENT_TYPES: ClassVar[frozenset[ComponentType]] = frozenset(
        {ComponentType.THREADED_PIPE}
    )

    pipe_id: str

    @classmethod
    def for_line(cls, *, drawing_norm: str, size: str, commodity_code: str) -> ThreadedPipeKey:
        return cls(pipe_id=f"{drawing_norm}-{size}-{commodity_code}-{AGGREGATE_SUFFIX}")

    def to_payload(self) -> IdentityPayload:
        return {"pipe_id": self.pipe_id}

    def token(self) -> str:
        return _token(self.to_payload())

    def label(self) -> str:
        return self.pipe_id


@dataclass(frozen=True, slots=True)
class StandardKey:
    """Per-unit key; a row with quantity N explodes into seq 1..N."""

    COMPONENT_TYPES: ClassVar[frozenset[ComponentType]] = frozenset(
        set(ComponentType)
        - {ComponentType.SPOOL, ComponentType.FIELD_WELD, ComponentType.THREADED_PIPE}
    )

    drawing_norm: str
    commodity_code: str
    size: str
    seq: int = 1

    def to_payload(self) -> IdentityPayload:
        return {
            "drawing_norm": self.drawing_norm,
            "commodity_code": self.commodity_code,
            "size": self.size,
            "seq": self.seq,
        }

    def token(self) -> str:
        return _token(self.to_payload())

    def label(self) -> str:
        return f"{self.drawing_norm}-{self.size}-{self.commodity_code}-{self.seq:03d}"


type IdentityKey = SpoolKey | WeldKey | ThreadedPipeKey | StandardKey


def build_identity_key(
    component_type: ComponentType,
    *,
    drawing_norm: str,
    commodity_code: str,
    size: str,
    seq: int = 1,
) -> IdentityKey:
    """Derive the identity key of one component from its mapped row values.

    Spools and field welds are tagged by their commodity code column (spool id
    and weld number respectively); threaded pipe collapses into an aggregate.
    """

    if component_type is ComponentType.SPOOL:
        return SpoolKey(spool_id=commodity_code)
    if component_type is ComponentType.FIELD_WELD:
        return WeldKey(drawing_norm=drawing_norm, weld_number=commodity_code)
    if component_type is ComponentType.THREADED_PIPE:
        return ThreadedPipeKey.for_line(
            drawing_norm=drawing_norm, size=size, commodity_code=commodity_code
        )
    return StandardKey(
        drawing_norm=drawing_norm, commodity_code=commodity_code, size=size, seq=seq
    )


def identity_key_from_payload(
    component_type: ComponentType, payload: Mapping[str, object]
) -> IdentityKey:
    """Rebuild the typed key for a stored component."""

    try:
        if component_type is ComponentType.SPOOL:
            return SpoolKey(spool_id=str(payload["spool_id"]))
        if component_type is ComponentType.FIELD_WELD:
            return WeldKey(
                drawing_norm=str(payload["drawing_norm"]),
                weld_number=str(payload["weld_number"]),
            )
        if component_type is ComponentType.THREADED_PIPE:
            return ThreadedPipeKey(pipe_id=str(payload["pipe_id"]))
        seq = payload["seq"]
        if not isinstance(seq, int):
            raise IdentityKeyError(f"seq must be an integer for {component_type}, got {seq!r}")
        return StandardKey(
            drawing_norm=str(payload["drawing_norm"]),
            commodity_code=str(payload["commodity_code"]),
            size=str(payload["size"]),
            seq=seq,
        )
    except KeyError as exc:
        raise IdentityKeyError(
            f"Identity payload for {component_type} is missing {exc.args[0]!r}"
        ) from exc
