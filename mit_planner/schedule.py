"""Schedule - a snapshot of uses kept in sync with its window set."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Collection, Iterable

from mit_planner.definitions import DefinitionTable
from mit_planner.engine import check_batch, compute_windows, is_available, shift_uses
from mit_planner.types import ScheduledUse, WindowSet

logger = logging.getLogger(__name__)


class Schedule:
    """Holds scheduled uses and the windows computed from them.

    Every accepted change replaces the use list and recomputes the window
    set from scratch. Rejected changes leave both untouched.
    """

    def __init__(
        self, table: DefinitionTable, uses: Iterable[ScheduledUse] = ()
    ) -> None:
        self._table = table
        self._uses: dict[str, ScheduledUse] = {}
        for use in uses:
            if use.id in self._uses:
                raise ValueError(f"duplicate use id {use.id!r}")
            self._uses[use.id] = use
        self._windows = compute_windows(self._uses.values(), table)

    # --- Queries ---

    @property
    def table(self) -> DefinitionTable:
        return self._table

    @property
    def windows(self) -> WindowSet:
        return self._windows

    def uses(self) -> list[ScheduledUse]:
        """All uses ordered by start time, then id."""
        return sorted(self._uses.values(), key=lambda u: (u.start_ms, u.id))

    def get(self, use_id: str) -> ScheduledUse | None:
        return self._uses.get(use_id)

    def __len__(self) -> int:
        return len(self._uses)

    def __contains__(self, use_id: object) -> bool:
        return use_id in self._uses

    def is_available(
        self,
        skill_id: str,
        time_ms: int,
        owner: str | None = None,
        exclude: Collection[str] = (),
    ) -> bool:
        """Could *skill_id* be placed at *time_ms* right now?"""
        if not exclude:
            if not self._table.has_skill(skill_id):
                return False
            if self._windows.is_degraded(skill_id, owner):
                return False
            return not any(
                w.contains(time_ms) for w in self._windows.for_skill(skill_id, owner)
            )
        return is_available(
            self._table, self._uses.values(), skill_id, time_ms, owner, exclude
        )

    # --- Mutations ---

    def add(self, use: ScheduledUse) -> bool:
        """Place a new use. Returns True if accepted."""
        if use.id in self._uses:
            raise ValueError(f"duplicate use id {use.id!r}")
        return self._apply([use])

    def move(self, use_id: str, start_ms: int) -> bool:
        """Move one use to *start_ms* (clamped at zero). Raises KeyError."""
        if use_id not in self._uses:
            raise KeyError(use_id)
        moved = dataclasses.replace(self._uses[use_id], start_ms=max(0, start_ms))
        return self._apply([moved])

    def move_batch(self, use_ids: Collection[str], delta_ms: int) -> bool:
        """Move several uses by the same delta, all or nothing.

        Unknown ids are ignored. Rejected if any use would start before
        zero or any placement conflicts.
        """
        moved = shift_uses(self._uses.values(), use_ids, delta_ms)
        if moved is None:
            logger.info("Rejecting move of %d uses: start before zero", len(use_ids))
            return False
        if not moved:
            return True
        return self._apply(moved)

    def remove(self, use_id: str) -> ScheduledUse:
        """Remove a use and return it. Raises KeyError if not present."""
        if use_id not in self._uses:
            raise KeyError(use_id)
        removed = self._uses.pop(use_id)
        self._recompute()
        return removed

    def _apply(self, placed: list[ScheduledUse]) -> bool:
        ids = {u.id for u in placed}
        rest = [u for u in self._uses.values() if u.id not in ids]
        if not check_batch(self._table, placed, rest):
            return False
        for use in placed:
            self._uses[use.id] = use
        self._recompute()
        return True

    def _recompute(self) -> None:
        self._windows = compute_windows(self._uses.values(), self._table)

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize uses (not definitions)."""
        return {
            "uses": [
                {
                    "id": u.id,
                    "skill_id": u.skill_id,
                    "start_ms": u.start_ms,
                    "owner": u.owner,
                }
                for u in self.uses()
            ],
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Replace all uses with snapshot data. No validation is applied."""
        self._uses.clear()
        for use_data in data.get("uses", []):
            use = ScheduledUse(**use_data)
            self._uses[use.id] = use
        self._recompute()
