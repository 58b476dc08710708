"""Tests for mit_planner.windows - boundary expansion and sweep."""
from __future__ import annotations

import pytest

from mit_planner import (
    Boundary,
    BoundaryKind,
    CooldownWindow,
    DefinitionTable,
    Edge,
    ResourceKey,
    ResourceKind,
    WindowKind,
    edges_to_boundaries,
    synthesize,
)

RAMPART = ResourceKey(ResourceKind.SKILL, "rampart")
BW_SKILL = ResourceKey(ResourceKind.SKILL, "bloodwhetting")
BW_GROUP = ResourceKey(ResourceKind.GROUP, "bw")


def _b(resource: ResourceKey, kind: BoundaryKind, t: int, skill: str = "rampart") -> Boundary:
    return Boundary(resource, skill, kind, t)


class TestEdgesToBoundaries:
    def test_falling_edge_backdates_unused(self, table: DefinitionTable) -> None:
        boundaries = edges_to_boundaries([Edge(RAMPART, False, 5000)], table)
        assert {(b.kind, b.time_ms) for b in boundaries} == {
            (BoundaryKind.UNUSED_START, -5000),
            (BoundaryKind.UNUSED_END, 5000),
            (BoundaryKind.COOLDOWN_START, 5000),
        }

    def test_rising_edge_closes_cooldown(self, table: DefinitionTable) -> None:
        boundaries = edges_to_boundaries([Edge(RAMPART, True, 15_000)], table)
        assert boundaries == [_b(RAMPART, BoundaryKind.COOLDOWN_END, 15_000)]

    def test_group_edge_reaches_every_member(self, table: DefinitionTable) -> None:
        boundaries = edges_to_boundaries([Edge(BW_GROUP, False, 0)], table)
        assert {b.skill_id for b in boundaries} == {"bloodwhetting", "nascent_flash"}
        starts = [b for b in boundaries if b.kind is BoundaryKind.UNUSED_START]
        # Backdated by the group's cooldown, not the skill's.
        assert {b.time_ms for b in starts} == {-10_000}


class TestSynthesize:
    def test_single_source(self) -> None:
        windows = synthesize(
            [
                _b(RAMPART, BoundaryKind.UNUSED_START, -5000),
                _b(RAMPART, BoundaryKind.UNUSED_END, 5000),
                _b(RAMPART, BoundaryKind.COOLDOWN_START, 5000),
                _b(RAMPART, BoundaryKind.COOLDOWN_END, 15_000),
            ]
        )
        assert windows == [
            CooldownWindow("rampart", None, WindowKind.UNUSABLE, -5000, 5000),
            CooldownWindow("rampart", None, WindowKind.COOLDOWN, 5000, 15_000),
        ]

    def test_cooldown_suppresses_then_unusable_reopens(self) -> None:
        windows = synthesize(
            [
                _b(BW_SKILL, BoundaryKind.UNUSED_START, 0, "bloodwhetting"),
                _b(BW_SKILL, BoundaryKind.UNUSED_END, 100, "bloodwhetting"),
                _b(BW_GROUP, BoundaryKind.COOLDOWN_START, 20, "bloodwhetting"),
                _b(BW_GROUP, BoundaryKind.COOLDOWN_END, 50, "bloodwhetting"),
            ]
        )
        assert [(w.kind, w.start_ms, w.end_ms) for w in windows] == [
            (WindowKind.UNUSABLE, 0, 20),
            (WindowKind.COOLDOWN, 20, 50),
            (WindowKind.UNUSABLE, 50, 100),
        ]

    def test_overlapping_sources_keep_cooldown_open(self) -> None:
        windows = synthesize(
            [
                _b(BW_SKILL, BoundaryKind.COOLDOWN_START, 0, "bloodwhetting"),
                _b(BW_GROUP, BoundaryKind.COOLDOWN_START, 0, "bloodwhetting"),
                _b(BW_GROUP, BoundaryKind.COOLDOWN_END, 10, "bloodwhetting"),
                _b(BW_SKILL, BoundaryKind.COOLDOWN_END, 30, "bloodwhetting"),
            ]
        )
        assert [(w.kind, w.start_ms, w.end_ms) for w in windows] == [
            (WindowKind.COOLDOWN, 0, 30),
        ]

    def test_simultaneous_close_and_open_do_not_split(self) -> None:
        windows = synthesize(
            [
                _b(RAMPART, BoundaryKind.COOLDOWN_START, 0),
                _b(RAMPART, BoundaryKind.COOLDOWN_END, 10),
                _b(RAMPART, BoundaryKind.COOLDOWN_START, 10),
                _b(RAMPART, BoundaryKind.COOLDOWN_END, 20),
            ]
        )
        assert [(w.start_ms, w.end_ms) for w in windows] == [(0, 20)]

    def test_owners_are_swept_separately(self) -> None:
        p1 = ResourceKey(ResourceKind.SKILL, "rampart", "p1")
        p2 = ResourceKey(ResourceKind.SKILL, "rampart", "p2")
        windows = synthesize(
            [
                _b(p1, BoundaryKind.COOLDOWN_START, 0),
                _b(p1, BoundaryKind.COOLDOWN_END, 10),
                _b(p2, BoundaryKind.COOLDOWN_START, 5),
                _b(p2, BoundaryKind.COOLDOWN_END, 15),
            ]
        )
        assert {(w.owner, w.start_ms, w.end_ms) for w in windows} == {
            ("p1", 0, 10),
            ("p2", 5, 15),
        }

    def test_skip_drops_scope(self) -> None:
        windows = synthesize(
            [
                _b(RAMPART, BoundaryKind.COOLDOWN_START, 0),
                _b(RAMPART, BoundaryKind.COOLDOWN_END, 10),
            ],
            skip={("rampart", None)},
        )
        assert windows == []

    def test_unclosed_window_raises(self) -> None:
        with pytest.raises(RuntimeError, match="never closed"):
            synthesize([_b(RAMPART, BoundaryKind.COOLDOWN_START, 0)])
