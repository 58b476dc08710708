"""Pulse builder - scheduled uses to consume/recover pulses."""
from __future__ import annotations

import logging
from typing import Iterable

from mit_planner.definitions import DefinitionTable
from mit_planner.types import (
    Diagnostic,
    Pulse,
    PulseKind,
    ResourceKey,
    ResourceKind,
    ScheduledUse,
)

logger = logging.getLogger(__name__)

# Recover sorts ahead of consume at the same instant: a charge that comes
# back exactly when a use starts is available to that use.
_PULSE_ORDER = {PulseKind.RECOVER: 0, PulseKind.CONSUME: 1}


def pulse_sort_key(pulse: Pulse) -> tuple[int, int, tuple[str, str, str], str]:
    return (
        pulse.time_ms,
        _PULSE_ORDER[pulse.kind],
        pulse.resource.sort_key(),
        pulse.use_id,
    )


def _pair(resource: ResourceKey, use: ScheduledUse, cooldown_ms: int) -> list[Pulse]:
    # A zero cooldown pool is never exhausted.
    if cooldown_ms == 0:
        return []
    return [
        Pulse(resource, PulseKind.CONSUME, use.start_ms, use.id),
        Pulse(resource, PulseKind.RECOVER, use.start_ms + cooldown_ms, use.id),
    ]


def build_pulses(
    uses: Iterable[ScheduledUse], table: DefinitionTable
) -> tuple[list[Pulse], list[Diagnostic]]:
    """Expand every use into pulses on its skill pool and its group pool.

    Uses that reference an unknown skill or group contribute no pulses and
    produce a :class:`Diagnostic` instead. The returned pulses are sorted.
    """
    pulses: list[Pulse] = []
    diagnostics: list[Diagnostic] = []

    for use in uses:
        if not table.has_skill(use.skill_id):
            diagnostics.append(
                Diagnostic(use.id, use.skill_id, f"unknown skill {use.skill_id!r}")
            )
            continue
        skill = table.skill(use.skill_id)
        if skill.group is not None and not table.has_group(skill.group):
            diagnostics.append(
                Diagnostic(
                    use.id,
                    use.skill_id,
                    f"skill {skill.id!r} references unknown group {skill.group!r}",
                )
            )
            continue

        pulses.extend(
            _pair(
                ResourceKey(ResourceKind.SKILL, skill.id, use.owner),
                use,
                skill.cooldown_ms,
            )
        )
        if skill.group is not None:
            group = table.group(skill.group)
            pulses.extend(
                _pair(
                    ResourceKey(ResourceKind.GROUP, group.id, use.owner),
                    use,
                    group.cooldown_ms,
                )
            )

    for diag in diagnostics:
        logger.warning("Skipping use %s: %s", diag.use_id, diag.message)

    pulses.sort(key=pulse_sort_key)
    return pulses, diagnostics
