"""DefinitionTable - read-only skill and cooldown group lookup."""
from __future__ import annotations

from typing import Any, Iterable

from mit_planner.types import (
    CooldownGroupDef,
    DefinitionError,
    ResourceKey,
    ResourceKind,
    SkillDef,
)


class DefinitionTable:
    """Immutable table of skill and shared cooldown group definitions.

    Built once and passed into every engine entry point. Skills may name a
    group that is not defined; uses of such skills are rejected by the
    engine with a diagnostic rather than at construction time.
    """

    __slots__ = ("_skills", "_groups", "_members")

    def __init__(
        self,
        skills: Iterable[SkillDef] = (),
        groups: Iterable[CooldownGroupDef] = (),
    ) -> None:
        skill_map: dict[str, SkillDef] = {}
        for skill in skills:
            if skill.id in skill_map:
                raise ValueError(f"duplicate skill id {skill.id!r}")
            skill_map[skill.id] = skill
        group_map: dict[str, CooldownGroupDef] = {}
        for group in groups:
            if group.id in group_map:
                raise ValueError(f"duplicate group id {group.id!r}")
            group_map[group.id] = group

        members: dict[str, list[str]] = {}
        for skill in skill_map.values():
            if skill.group is not None:
                members.setdefault(skill.group, []).append(skill.id)

        object.__setattr__(self, "_skills", skill_map)
        object.__setattr__(self, "_groups", group_map)
        object.__setattr__(
            self, "_members", {g: tuple(ids) for g, ids in members.items()}
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("DefinitionTable is immutable")

    # --- Lookups ---

    def skill(self, skill_id: str) -> SkillDef:
        """Look up a skill. Raises KeyError if not defined."""
        if skill_id not in self._skills:
            raise KeyError(skill_id)
        return self._skills[skill_id]

    def group(self, group_id: str) -> CooldownGroupDef:
        """Look up a group. Raises KeyError if not defined."""
        if group_id not in self._groups:
            raise KeyError(group_id)
        return self._groups[group_id]

    def has_skill(self, skill_id: str) -> bool:
        return skill_id in self._skills

    def has_group(self, group_id: str) -> bool:
        return group_id in self._groups

    def members(self, group_id: str) -> tuple[str, ...]:
        """Skill ids sharing *group_id*, in definition order."""
        return self._members.get(group_id, ())

    def skill_ids(self) -> list[str]:
        return list(self._skills)

    def group_ids(self) -> list[str]:
        return list(self._groups)

    # --- Resources ---

    def capacity(self, resource: ResourceKey) -> int:
        """Charge capacity of a resource. Raises KeyError if undefined."""
        if resource.kind is ResourceKind.SKILL:
            return self.skill(resource.ident).stacks
        if resource.kind is ResourceKind.GROUP:
            return self.group(resource.ident).stacks
        raise ValueError(f"unknown resource kind {resource.kind!r}")

    def cooldown_ms(self, resource: ResourceKey) -> int:
        """Recharge time of one charge of a resource, in milliseconds."""
        if resource.kind is ResourceKind.SKILL:
            return self.skill(resource.ident).cooldown_ms
        if resource.kind is ResourceKind.GROUP:
            return self.group(resource.ident).cooldown_ms
        raise ValueError(f"unknown resource kind {resource.kind!r}")

    def affected_skills(self, resource: ResourceKey) -> tuple[str, ...]:
        """Skills whose availability depends on *resource*."""
        if resource.kind is ResourceKind.SKILL:
            return (resource.ident,)
        if resource.kind is ResourceKind.GROUP:
            return self.members(resource.ident)
        raise ValueError(f"unknown resource kind {resource.kind!r}")

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize definitions as plain dicts."""
        return {
            "skills": {
                s.id: {"cooldown": s.cooldown, "stacks": s.stacks, "group": s.group}
                for s in self._skills.values()
            },
            "groups": {
                g.id: {"cooldown": g.cooldown, "stacks": g.stacks}
                for g in self._groups.values()
            },
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> DefinitionTable:
        """Build a table from :meth:`snapshot` output (or parsed YAML)."""
        skills_data = data.get("skills") or {}
        groups_data = data.get("groups") or {}
        if not isinstance(skills_data, dict) or not isinstance(groups_data, dict):
            raise DefinitionError("'skills' and 'groups' must be mappings")

        skills: list[SkillDef] = []
        for skill_id, entry in skills_data.items():
            if not isinstance(entry, dict) or "cooldown" not in entry:
                raise DefinitionError(f"skill {skill_id!r} needs a 'cooldown'")
            try:
                skills.append(
                    SkillDef(
                        id=str(skill_id),
                        cooldown=float(entry["cooldown"]),
                        stacks=int(entry.get("stacks", 1)),
                        group=entry.get("group"),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise DefinitionError(f"skill {skill_id!r}: {exc}") from exc

        groups: list[CooldownGroupDef] = []
        for group_id, entry in groups_data.items():
            if not isinstance(entry, dict) or "cooldown" not in entry:
                raise DefinitionError(f"group {group_id!r} needs a 'cooldown'")
            try:
                groups.append(
                    CooldownGroupDef(
                        id=str(group_id),
                        cooldown=float(entry["cooldown"]),
                        stacks=int(entry.get("stacks", 1)),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise DefinitionError(f"group {group_id!r}: {exc}") from exc

        return cls(skills, groups)
