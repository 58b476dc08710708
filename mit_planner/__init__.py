"""mit-planner - Mitigation availability engine for combat timelines."""
from mit_planner.config import (
    DEFAULT_DEFINITIONS_PATH,
    configure_logging,
    load_definitions,
    parse_definitions,
)
from mit_planner.cover import merge, resolve, subtract
from mit_planner.definitions import DefinitionTable
from mit_planner.engine import check_batch, compute_windows, is_available, shift_uses
from mit_planner.pulses import build_pulses
from mit_planner.schedule import Schedule
from mit_planner.tracker import StackTracker, TrackResult, track
from mit_planner.types import (
    Boundary,
    BoundaryKind,
    ChargeFailure,
    CooldownGroupDef,
    CooldownWindow,
    DefinitionError,
    Diagnostic,
    Edge,
    MalformedWindowError,
    Pulse,
    PulseKind,
    ResourceKey,
    ResourceKind,
    ScheduledUse,
    SkillDef,
    WindowKind,
    WindowSet,
)
from mit_planner.windows import edges_to_boundaries, synthesize

__all__ = [
    "Boundary",
    "BoundaryKind",
    "ChargeFailure",
    "CooldownGroupDef",
    "CooldownWindow",
    "DEFAULT_DEFINITIONS_PATH",
    "DefinitionError",
    "DefinitionTable",
    "Diagnostic",
    "Edge",
    "MalformedWindowError",
    "Pulse",
    "PulseKind",
    "ResourceKey",
    "ResourceKind",
    "Schedule",
    "ScheduledUse",
    "SkillDef",
    "StackTracker",
    "TrackResult",
    "WindowKind",
    "WindowSet",
    "build_pulses",
    "check_batch",
    "compute_windows",
    "configure_logging",
    "edges_to_boundaries",
    "is_available",
    "load_definitions",
    "merge",
    "parse_definitions",
    "resolve",
    "shift_uses",
    "subtract",
    "synthesize",
    "track",
]
