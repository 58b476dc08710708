"""Stack tracker - replays pulses and reports charge edges."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mit_planner.definitions import DefinitionTable
from mit_planner.pulses import pulse_sort_key
from mit_planner.types import (
    ChargeFailure,
    Edge,
    Pulse,
    PulseKind,
    ResourceKey,
    ResourceKind,
)

logger = logging.getLogger(__name__)


@dataclass
class TrackResult:
    """Edges per healthy resource, plus failures and per-use charge counts."""

    edges: dict[ResourceKey, list[Edge]] = field(default_factory=dict)
    failures: dict[ResourceKey, ChargeFailure] = field(default_factory=dict)
    charges_after: dict[str, int] = field(default_factory=dict)


class StackTracker:
    """Running charge counters, one per resource, starting at capacity."""

    def __init__(self, table: DefinitionTable) -> None:
        self._table = table
        self._charges: dict[ResourceKey, int] = {}
        self._result = TrackResult()

    def charges(self, resource: ResourceKey) -> int:
        """Current charge count (capacity if never touched)."""
        if resource not in self._charges:
            return self._table.capacity(resource)
        return self._charges[resource]

    def apply(self, pulse: Pulse) -> Edge | None:
        """Apply one pulse. Returns the edge it produced, if any."""
        resource = pulse.resource
        if resource in self._result.failures:
            return None

        current = self.charges(resource)
        edge: Edge | None = None

        if pulse.kind is PulseKind.CONSUME:
            if current == 0:
                failure = ChargeFailure(resource, pulse.use_id, pulse.time_ms)
                self._result.failures[resource] = failure
                self._result.edges.pop(resource, None)
                logger.warning(
                    "%s %r (owner %r) has no charge left for use %s at %dms",
                    resource.kind.value,
                    resource.ident,
                    resource.owner,
                    pulse.use_id,
                    pulse.time_ms,
                )
                return None
            current -= 1
            if current == 0:
                edge = Edge(resource, rising=False, time_ms=pulse.time_ms)
            if resource.kind is ResourceKind.SKILL:
                self._result.charges_after[pulse.use_id] = current
        elif pulse.kind is PulseKind.RECOVER:
            current += 1
            if current == 1:
                edge = Edge(resource, rising=True, time_ms=pulse.time_ms)
        else:
            raise ValueError(f"unknown pulse kind {pulse.kind!r}")

        self._charges[resource] = current
        if edge is not None:
            self._result.edges.setdefault(resource, []).append(edge)
        return edge

    def result(self) -> TrackResult:
        return self._result


def track(pulses: list[Pulse], table: DefinitionTable) -> TrackResult:
    """Replay *pulses* in time order (recover before consume on ties)."""
    tracker = StackTracker(table)
    for pulse in sorted(pulses, key=pulse_sort_key):
        tracker.apply(pulse)
    return tracker.result()
