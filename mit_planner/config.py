"""Definition table loading and logging setup."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from mit_planner.definitions import DefinitionTable
from mit_planner.types import DefinitionError

DEFAULT_DEFINITIONS_PATH = Path(__file__).resolve().parent / "data" / "tanks.yaml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def parse_definitions(data: dict[str, Any] | None) -> DefinitionTable:
    """Convert raw mapping data into a :class:`DefinitionTable`.

    Expected shape::

        skills:
          <skill_id>: {cooldown: <seconds>, stacks: <int>, group: <group_id>}
        groups:
          <group_id>: {cooldown: <seconds>, stacks: <int>}
    """
    if data is None:
        return DefinitionTable()
    if not isinstance(data, dict):
        raise DefinitionError("definition data must be a mapping")
    return DefinitionTable.from_snapshot(data)


def load_definitions(path: Path = DEFAULT_DEFINITIONS_PATH) -> DefinitionTable:
    """Load a definition table from a YAML file. Raises FileNotFoundError."""
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    table = parse_definitions(raw)
    logger.debug(
        "Loaded %d skills and %d groups from %s",
        len(table.skill_ids()),
        len(table.group_ids()),
        path,
    )
    return table


def configure_logging(
    level: str = "INFO", module_levels: dict[str, str] | None = None
) -> None:
    """Configure root logging plus optional per-module levels.

    Meant for applications embedding the engine; the library itself never
    installs handlers.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )
    for module_name, level_str in (module_levels or {}).items():
        numeric = getattr(logging, level_str.upper(), None)
        if isinstance(numeric, int):
            logging.getLogger(module_name).setLevel(numeric)
        else:
            logger.warning(
                "Invalid log level '%s' for module '%s'.", level_str, module_name
            )


__all__ = [
    "DEFAULT_DEFINITIONS_PATH",
    "configure_logging",
    "load_definitions",
    "parse_definitions",
]
