"""Core data types for the mitigation availability engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

MS_PER_SEC = 1000


class ResourceKind(str, Enum):
    SKILL = "skill"
    GROUP = "group"


class PulseKind(str, Enum):
    RECOVER = "recover"
    CONSUME = "consume"


class BoundaryKind(str, Enum):
    UNUSED_START = "unused_start"
    UNUSED_END = "unused_end"
    COOLDOWN_START = "cooldown_start"
    COOLDOWN_END = "cooldown_end"


class WindowKind(str, Enum):
    COOLDOWN = "cooldown"
    UNUSABLE = "unusable"


class MalformedWindowError(ValueError):
    """Raised when a window with ``end_ms <= start_ms`` is constructed."""


class DefinitionError(ValueError):
    """Raised on malformed definition data (YAML or snapshot)."""


@dataclass(frozen=True)
class SkillDef:
    """Immutable skill definition.

    Attributes:
        id: Unique skill identifier.
        cooldown: Recharge time of one charge, in seconds.
        stacks: Maximum number of charges held at once.
        group: Shared cooldown group id, or None.
    """

    id: str
    cooldown: float
    stacks: int = 1
    group: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("SkillDef id must be non-empty")
        if self.cooldown < 0:
            raise ValueError(f"cooldown must be >= 0, got {self.cooldown}")
        if self.stacks < 1:
            raise ValueError(f"stacks must be >= 1, got {self.stacks}")

    @property
    def cooldown_ms(self) -> int:
        return round(self.cooldown * MS_PER_SEC)


@dataclass(frozen=True)
class CooldownGroupDef:
    """Immutable shared cooldown group definition."""

    id: str
    cooldown: float
    stacks: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("CooldownGroupDef id must be non-empty")
        if self.cooldown < 0:
            raise ValueError(f"cooldown must be >= 0, got {self.cooldown}")
        if self.stacks < 1:
            raise ValueError(f"stacks must be >= 1, got {self.stacks}")

    @property
    def cooldown_ms(self) -> int:
        return round(self.cooldown * MS_PER_SEC)


@dataclass(frozen=True)
class ScheduledUse:
    """A placed use of a skill. ``owner`` partitions charge pools."""

    id: str
    skill_id: str
    start_ms: int
    owner: str | None = None


@dataclass(frozen=True)
class ResourceKey:
    """A tracked charge pool: one skill or one group, for one owner."""

    kind: ResourceKind
    ident: str
    owner: str | None = None

    def sort_key(self) -> tuple[str, str, str]:
        return (self.kind.value, self.ident, "" if self.owner is None else self.owner)


@dataclass(frozen=True)
class Pulse:
    resource: ResourceKey
    kind: PulseKind
    time_ms: int
    use_id: str


@dataclass(frozen=True)
class Edge:
    """Charge counter hit zero (falling) or came back to one (rising)."""

    resource: ResourceKey
    rising: bool
    time_ms: int


@dataclass(frozen=True)
class Boundary:
    resource: ResourceKey
    skill_id: str
    kind: BoundaryKind
    time_ms: int


@dataclass(frozen=True)
class CooldownWindow:
    """Half-open interval ``[start_ms, end_ms)`` during which a skill is blocked."""

    skill_id: str
    owner: str | None
    kind: WindowKind
    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if self.end_ms <= self.start_ms:
            raise MalformedWindowError(
                f"window for {self.skill_id!r} has end {self.end_ms} "
                f"<= start {self.start_ms}"
            )

    def contains(self, time_ms: int) -> bool:
        return self.start_ms <= time_ms < self.end_ms

    def sort_key(self) -> tuple[int, int, str, str, str]:
        owner = "" if self.owner is None else self.owner
        return (self.start_ms, self.end_ms, self.skill_id, owner, self.kind.value)


@dataclass(frozen=True)
class Diagnostic:
    """A use that was left out of the computation."""

    use_id: str
    skill_id: str
    message: str


@dataclass(frozen=True)
class ChargeFailure:
    """A consume found the resource already at zero charges."""

    resource: ResourceKey
    use_id: str
    time_ms: int


@dataclass
class WindowSet:
    """Result of one full computation over a schedule snapshot.

    Attributes:
        windows: Final windows, sorted, non-overlapping per (skill, owner, kind).
        diagnostics: Uses skipped because of unknown definitions.
        failures: Resources whose replay went below zero charges.
        degraded: (skill_id, owner) pairs whose windows are unknown.
        charges_after: Charges left on the skill's own pool after each use.
    """

    windows: list[CooldownWindow] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    failures: list[ChargeFailure] = field(default_factory=list)
    degraded: set[tuple[str, str | None]] = field(default_factory=set)
    charges_after: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no resource failed."""
        return not self.failures

    def for_skill(
        self, skill_id: str, owner: str | None = None
    ) -> list[CooldownWindow]:
        return [
            w for w in self.windows if w.skill_id == skill_id and w.owner == owner
        ]

    def is_degraded(self, skill_id: str, owner: str | None = None) -> bool:
        return (skill_id, owner) in self.degraded
