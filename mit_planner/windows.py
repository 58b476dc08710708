"""Window synthesizer - charge edges to raw cooldown/unusable windows.

A falling edge at ``t`` on a resource with cooldown ``d`` opens a cooldown
window at ``t`` for every skill the resource affects, and an unusable
window over ``[t - d, t)``: a further use anywhere in that span would
still be recharging at ``t`` and leave the use at ``t`` without a charge.
The matching rising edge closes the cooldown window.

A skill may be constrained by its own pool and by its group's pool at the
same time. Boundaries are counted per source pool; cooldown is open while
any source has one open, unusable is open while any source demands it and
no cooldown is open.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from mit_planner.definitions import DefinitionTable
from mit_planner.types import (
    Boundary,
    BoundaryKind,
    CooldownWindow,
    Edge,
    ResourceKey,
    WindowKind,
)

SkillScope = tuple[str, str | None]


def edges_to_boundaries(
    edges: Iterable[Edge], table: DefinitionTable
) -> list[Boundary]:
    """Expand edges into boundaries for each affected skill."""
    boundaries: list[Boundary] = []
    for edge in edges:
        resource = edge.resource
        skills = table.affected_skills(resource)
        if edge.rising:
            for skill_id in skills:
                boundaries.append(
                    Boundary(resource, skill_id, BoundaryKind.COOLDOWN_END, edge.time_ms)
                )
            continue

        cooldown_ms = table.cooldown_ms(resource)
        for skill_id in skills:
            boundaries.append(
                Boundary(
                    resource,
                    skill_id,
                    BoundaryKind.UNUSED_START,
                    edge.time_ms - cooldown_ms,
                )
            )
            boundaries.append(
                Boundary(resource, skill_id, BoundaryKind.UNUSED_END, edge.time_ms)
            )
            boundaries.append(
                Boundary(resource, skill_id, BoundaryKind.COOLDOWN_START, edge.time_ms)
            )
    return boundaries


class _ScopeSweep:
    """Open/close counters for one (skill, owner), keyed by source pool."""

    def __init__(self, skill_id: str, owner: str | None) -> None:
        self.skill_id = skill_id
        self.owner = owner
        self._cooldown: dict[ResourceKey, int] = defaultdict(int)
        self._unused: dict[ResourceKey, int] = defaultdict(int)
        self._open: dict[WindowKind, int | None] = {
            WindowKind.COOLDOWN: None,
            WindowKind.UNUSABLE: None,
        }
        self.windows: list[CooldownWindow] = []

    def apply(self, boundary: Boundary) -> None:
        kind = boundary.kind
        source = boundary.resource
        if kind is BoundaryKind.UNUSED_START:
            self._unused[source] += 1
        elif kind is BoundaryKind.UNUSED_END:
            self._unused[source] -= 1
        elif kind is BoundaryKind.COOLDOWN_START:
            self._cooldown[source] += 1
        elif kind is BoundaryKind.COOLDOWN_END:
            self._cooldown[source] -= 1
        else:
            raise ValueError(f"unknown boundary kind {kind!r}")

    def sample(self, time_ms: int) -> None:
        """Open or close windows to match the counters at *time_ms*."""
        cooling = any(n > 0 for n in self._cooldown.values())
        blocked = not cooling and any(n > 0 for n in self._unused.values())
        self._toggle(WindowKind.COOLDOWN, cooling, time_ms)
        self._toggle(WindowKind.UNUSABLE, blocked, time_ms)

    def _toggle(self, kind: WindowKind, active: bool, time_ms: int) -> None:
        started = self._open[kind]
        if active and started is None:
            self._open[kind] = time_ms
        elif not active and started is not None:
            self.windows.append(
                CooldownWindow(self.skill_id, self.owner, kind, started, time_ms)
            )
            self._open[kind] = None

    def finish(self) -> list[CooldownWindow]:
        for kind, started in self._open.items():
            if started is not None:
                raise RuntimeError(
                    f"{kind.value} window for {self.skill_id!r} "
                    f"opened at {started}ms was never closed"
                )
        return self.windows


def synthesize(
    boundaries: Iterable[Boundary],
    skip: set[SkillScope] | None = None,
) -> list[CooldownWindow]:
    """Sweep boundaries per (skill, owner) and emit raw windows.

    Scopes listed in *skip* (degraded skills) produce no windows.
    """
    by_scope: dict[SkillScope, list[Boundary]] = defaultdict(list)
    for boundary in boundaries:
        scope = (boundary.skill_id, boundary.resource.owner)
        if skip and scope in skip:
            continue
        by_scope[scope].append(boundary)

    windows: list[CooldownWindow] = []
    for (skill_id, owner), items in by_scope.items():
        items.sort(key=lambda b: b.time_ms)
        sweep = _ScopeSweep(skill_id, owner)
        i = 0
        while i < len(items):
            now = items[i].time_ms
            while i < len(items) and items[i].time_ms == now:
                sweep.apply(items[i])
                i += 1
            sweep.sample(now)
        windows.extend(sweep.finish())
    return windows
