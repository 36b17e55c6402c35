#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Robot SAVO — savo_turntable/registry.py
---------------------------------------
Named turntables with a planar (or 3D) position, and selection of the one an
operator is standing next to.

- `nearest_within(pos, max_distance)` -> the closest table inside the search
  radius, or None (caller falls back to showing the whole list)
- `list_by_distance(pos)` -> every table, closest first, for a selection list
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .constants import SEARCH_DISTANCE_DEFAULT
from .drivers.actuator import TurntableActuator
from .drivers.turntable_exceptions import TurntableErrorContext, TurntableValidationError

Position = Tuple[float, ...]


@dataclass(frozen=True)
class TurntableEntry:
    name: str
    actuator: TurntableActuator
    position: Position


class TurntableRegistry:
    def __init__(self) -> None:
        self._entries: Dict[str, TurntableEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[TurntableEntry]:
        return iter(list(self._entries.values()))

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------
    def register(
        self,
        actuator: TurntableActuator,
        position: Sequence[float],
        *,
        name: Optional[str] = None,
    ) -> TurntableEntry:
        """Add or replace a table. The name defaults to `actuator.name`."""
        key = str(name if name is not None else getattr(actuator, "name", "")).strip()
        if not key:
            raise TurntableValidationError(
                "turntable name must not be empty",
                context=TurntableErrorContext(operation="register"),
            )

        pos = tuple(float(c) for c in position)
        if not pos or not all(math.isfinite(c) for c in pos):
            raise TurntableValidationError(
                "turntable position must be a non-empty finite coordinate",
                context=TurntableErrorContext(actuator=key, operation="register", value=repr(pos)),
            )

        entry = TurntableEntry(name=key, actuator=actuator, position=pos)
        self._entries[key] = entry
        return entry

    def unregister(self, name: str) -> bool:
        return self._entries.pop(name, None) is not None

    def get(self, name: str) -> Optional[TurntableEntry]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------
    def list_by_distance(self, position: Sequence[float]) -> List[Tuple[TurntableEntry, float]]:
        """All tables as (entry, distance), closest first; ties keep registration order."""
        origin = tuple(float(c) for c in position)
        ranked = [(entry, self._distance(origin, entry)) for entry in self._entries.values()]
        ranked.sort(key=lambda item: item[1])
        return ranked

    def nearest_within(
        self,
        position: Sequence[float],
        max_distance: float = SEARCH_DISTANCE_DEFAULT,
    ) -> Optional[TurntableEntry]:
        ranked = self.list_by_distance(position)
        if not ranked:
            return None
        entry, distance = ranked[0]
        return entry if distance <= max_distance else None

    @staticmethod
    def _distance(origin: Position, entry: TurntableEntry) -> float:
        if len(origin) != len(entry.position):
            raise TurntableValidationError(
                "position dimensions do not match",
                context=TurntableErrorContext(
                    actuator=entry.name,
                    operation="distance",
                    value=f"{len(origin)}d vs {len(entry.position)}d",
                ),
            )
        return math.dist(origin, entry.position)


__all__ = [
    "Position",
    "TurntableEntry",
    "TurntableRegistry",
]
