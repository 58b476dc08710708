"""Availability engine entry points.

Every function here is pure: it takes a snapshot of scheduled uses and a
:class:`DefinitionTable` and recomputes everything from scratch.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Collection, Iterable

from mit_planner.cover import resolve
from mit_planner.definitions import DefinitionTable
from mit_planner.pulses import build_pulses
from mit_planner.tracker import track
from mit_planner.types import ResourceKey, ResourceKind, ScheduledUse, WindowSet
from mit_planner.windows import edges_to_boundaries, synthesize

logger = logging.getLogger(__name__)


def compute_windows(
    uses: Iterable[ScheduledUse], table: DefinitionTable
) -> WindowSet:
    """Compute cooldown and unusable windows for a full schedule."""
    uses = list(uses)
    pulses, diagnostics = build_pulses(uses, table)
    tracked = track(pulses, table)

    degraded: set[tuple[str, str | None]] = set()
    for resource in tracked.failures:
        for skill_id in table.affected_skills(resource):
            degraded.add((skill_id, resource.owner))

    edges = [edge for resource_edges in tracked.edges.values() for edge in resource_edges]
    raw = synthesize(edges_to_boundaries(edges, table), skip=degraded)
    windows = resolve(raw)

    charges_after = dict(tracked.charges_after)
    skipped = {d.use_id for d in diagnostics}
    for use in uses:
        # Zero-cooldown skills produce no pulses and never spend a charge.
        if use.id not in charges_after and use.id not in skipped:
            charges_after[use.id] = table.skill(use.skill_id).stacks

    failures = sorted(
        tracked.failures.values(), key=lambda f: (f.time_ms, f.resource.sort_key())
    )
    logger.debug(
        "Computed %d windows from %d uses (%d pulses, %d failures, %d skipped)",
        len(windows),
        len(uses),
        len(pulses),
        len(failures),
        len(diagnostics),
    )
    return WindowSet(
        windows=windows,
        diagnostics=diagnostics,
        failures=failures,
        degraded=degraded,
        charges_after=charges_after,
    )


def is_available(
    table: DefinitionTable,
    uses: Iterable[ScheduledUse],
    skill_id: str,
    time_ms: int,
    owner: str | None = None,
    exclude: Collection[str] = (),
) -> bool:
    """Can *skill_id* be used by *owner* at *time_ms*?

    Uses whose ids are in *exclude* (the ones being moved) are left out of
    the computation. An unknown skill, or one whose charge pool replay
    failed, is reported unavailable.
    """
    if not table.has_skill(skill_id):
        return False
    remaining = [u for u in uses if u.id not in exclude]
    result = compute_windows(remaining, table)
    return _is_free(result, skill_id, owner, time_ms)


def _is_free(
    result: WindowSet, skill_id: str, owner: str | None, time_ms: int
) -> bool:
    if result.is_degraded(skill_id, owner):
        return False
    return not any(w.contains(time_ms) for w in result.for_skill(skill_id, owner))


def _touched_resources(
    uses: Iterable[ScheduledUse], table: DefinitionTable
) -> set[ResourceKey]:
    touched: set[ResourceKey] = set()
    for use in uses:
        skill = table.skill(use.skill_id)
        touched.add(ResourceKey(ResourceKind.SKILL, skill.id, use.owner))
        if skill.group is not None:
            touched.add(ResourceKey(ResourceKind.GROUP, skill.group, use.owner))
    return touched


def check_batch(
    table: DefinitionTable,
    proposed: Iterable[ScheduledUse],
    rest: Iterable[ScheduledUse],
) -> bool:
    """Accept or reject a group of placements as a whole.

    Windows are computed from *rest* (the uses not being placed); every
    proposed use must start outside them. The proposed uses must also be
    legal together, so the combined schedule is replayed and any charge
    failure on a pool the proposal touches rejects the batch.
    """
    proposed = list(proposed)
    rest = list(rest)
    if not proposed:
        return True

    for use in proposed:
        skill = table.skill(use.skill_id) if table.has_skill(use.skill_id) else None
        if skill is None or (skill.group is not None and not table.has_group(skill.group)):
            logger.info("Rejecting batch: use %s has unknown definitions", use.id)
            return False

    base = compute_windows(rest, table)
    for use in proposed:
        if not _is_free(base, use.skill_id, use.owner, use.start_ms):
            logger.info(
                "Rejecting batch: %s blocked at %dms (use %s)",
                use.skill_id,
                use.start_ms,
                use.id,
            )
            return False

    combined = compute_windows(rest + proposed, table)
    touched = _touched_resources(proposed, table)
    for failure in combined.failures:
        if failure.resource in touched:
            logger.info(
                "Rejecting batch: %s %r runs out of charges at %dms",
                failure.resource.kind.value,
                failure.resource.ident,
                failure.time_ms,
            )
            return False
    return True


def shift_uses(
    uses: Iterable[ScheduledUse], ids: Collection[str], delta_ms: int
) -> list[ScheduledUse] | None:
    """Return copies of the uses in *ids* moved by *delta_ms*.

    Returns None if any moved use would start before zero.
    """
    moved: list[ScheduledUse] = []
    for use in uses:
        if use.id not in ids:
            continue
        start = use.start_ms + delta_ms
        if start < 0:
            return None
        moved.append(dataclasses.replace(use, start_ms=start))
    return moved
