"""Cover resolver - interval union and cooldown-over-unusable clipping."""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from mit_planner.types import CooldownWindow, WindowKind

_ScopeKey = tuple[str, str | None, WindowKind]


def merge(windows: Iterable[CooldownWindow]) -> list[CooldownWindow]:
    """Union touching or overlapping windows of the same (skill, owner, kind)."""
    grouped: dict[_ScopeKey, list[CooldownWindow]] = defaultdict(list)
    for w in windows:
        grouped[(w.skill_id, w.owner, w.kind)].append(w)

    merged: list[CooldownWindow] = []
    for (skill_id, owner, kind), items in grouped.items():
        items.sort(key=lambda w: (w.start_ms, w.end_ms))
        start, end = items[0].start_ms, items[0].end_ms
        for w in items[1:]:
            if w.start_ms <= end:
                end = max(end, w.end_ms)
                continue
            merged.append(CooldownWindow(skill_id, owner, kind, start, end))
            start, end = w.start_ms, w.end_ms
        merged.append(CooldownWindow(skill_id, owner, kind, start, end))
    return merged


def subtract(
    window: CooldownWindow, covers: Iterable[CooldownWindow]
) -> list[CooldownWindow]:
    """Return the parts of *window* not covered by any of *covers*.

    *covers* must be sorted by start and non-overlapping.
    """
    pieces: list[CooldownWindow] = []
    cursor = window.start_ms
    for cover in covers:
        if cover.end_ms <= cursor:
            continue
        if cover.start_ms >= window.end_ms:
            break
        if cover.start_ms > cursor:
            pieces.append(
                CooldownWindow(
                    window.skill_id, window.owner, window.kind, cursor, cover.start_ms
                )
            )
        cursor = max(cursor, cover.end_ms)
        if cursor >= window.end_ms:
            return pieces
    if cursor < window.end_ms:
        pieces.append(
            CooldownWindow(
                window.skill_id, window.owner, window.kind, cursor, window.end_ms
            )
        )
    return pieces


def resolve(windows: Iterable[CooldownWindow]) -> list[CooldownWindow]:
    """Merge same-kind windows, then clip unusable windows by cooldown ones.

    The result is sorted by start and non-overlapping per (skill, owner,
    kind); no unusable window overlaps a cooldown window of its skill.
    """
    merged = merge(windows)

    cooldowns: dict[tuple[str, str | None], list[CooldownWindow]] = defaultdict(list)
    for w in merged:
        if w.kind is WindowKind.COOLDOWN:
            cooldowns[(w.skill_id, w.owner)].append(w)
    for items in cooldowns.values():
        items.sort(key=lambda w: w.start_ms)

    resolved: list[CooldownWindow] = []
    for w in merged:
        if w.kind is WindowKind.COOLDOWN:
            resolved.append(w)
        elif w.kind is WindowKind.UNUSABLE:
            resolved.extend(subtract(w, cooldowns.get((w.skill_id, w.owner), [])))
        else:
            raise ValueError(f"unknown window kind {w.kind!r}")

    resolved.sort(key=CooldownWindow.sort_key)
    return resolved
