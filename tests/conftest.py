"""Shared fixtures for mit_planner tests."""
from __future__ import annotations

import pytest

from mit_planner import CooldownGroupDef, DefinitionTable, SkillDef


@pytest.fixture
def table() -> DefinitionTable:
    """Small table: single-charge, two-charge and grouped skills."""
    return DefinitionTable(
        skills=[
            SkillDef(id="rampart", cooldown=10),
            SkillDef(id="oblation", cooldown=60, stacks=2),
            SkillDef(id="bloodwhetting", cooldown=30, group="bw"),
            SkillDef(id="nascent_flash", cooldown=30, group="bw"),
            SkillDef(id="sprint", cooldown=0),
            SkillDef(id="orphan", cooldown=10, group="missing"),
        ],
        groups=[CooldownGroupDef(id="bw", cooldown=10)],
    )
