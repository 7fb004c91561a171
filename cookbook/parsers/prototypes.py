# -*- coding: utf-8 -*-
"""YAML prototype reader.

Game prototypes live in `Resources/Prototypes/**/*.yml`. Each file is a list
of prototype mappings with a `type` and an `id`. The game uses `!type:Name`
tags to pick a concrete class for polymorphic values; those are turned into
plain mappings carrying the class name under the `!type` key.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from cookbook.schemas.prototypes import (
    ConstructionGraphPrototype,
    EntityPrototype,
    MicrowaveMealRecipe,
    RawGameData,
    ReactionPrototype,
    ReagentPrototype,
    StackPrototype,
)

__all__ = [
    "PrototypeLoader",
    "RELEVANT_FILE_RE",
    "find_prototype_files",
    "load_yaml_file",
    "read_prototype_file",
    "read_raw_game_data",
]

logger = logging.getLogger(__name__)

# Most prototype files hold nothing we need. A cheap text scan avoids parsing them.
RELEVANT_FILE_RE = re.compile(
    r"\btype:\s+(?:constructionGraph|entity|microwaveMealRecipe|reaction|reagent|stack)\b"
)

RELEVANT_TYPES = frozenset(
    {"constructionGraph", "entity", "microwaveMealRecipe", "reaction", "reagent", "stack"}
)


class PrototypeLoader(yaml.SafeLoader):
    """SafeLoader that understands the game's custom tags."""


def _construct_untagged(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


def _construct_type_tag(loader: yaml.SafeLoader, type_name: str, node: yaml.Node) -> Any:
    value = _construct_untagged(loader, node)
    if isinstance(value, dict):
        value["!type"] = type_name
    return value


def _construct_unknown_tag(loader: yaml.SafeLoader, _suffix: str, node: yaml.Node) -> Any:
    return _construct_untagged(loader, node)


PrototypeLoader.add_multi_constructor("!type:", _construct_type_tag)
PrototypeLoader.add_multi_constructor("!", _construct_unknown_tag)


def load_yaml_file(path: Path) -> Any:
    text = Path(path).read_text(encoding="utf-8-sig")
    return yaml.load(text, Loader=PrototypeLoader)


def find_prototype_files(prototype_dir: Path) -> List[Path]:
    root = Path(prototype_dir)
    if not root.is_dir():
        logger.warning("Prototype directory does not exist: %s", root)
        return []
    return sorted(root.rglob("*.yml"))


def read_prototype_file(path: Path) -> Optional[List[Any]]:
    """Parse one prototype file, or return None when it holds nothing relevant."""
    text = Path(path).read_text(encoding="utf-8-sig")
    if not RELEVANT_FILE_RE.search(text):
        return None

    doc = yaml.load(text, Loader=PrototypeLoader)
    if not isinstance(doc, list):
        logger.warning("%s: top-level structure is not a list, ignoring", path)
        return None
    return doc


def _is_relevant(node: Any) -> bool:
    return (
        isinstance(node, dict)
        and isinstance(node.get("id"), str)
        and node.get("type") in RELEVANT_TYPES
    )


def read_raw_game_data(paths: Iterable[Path]) -> RawGameData:
    raw = RawGameData()
    for path in paths:
        doc = read_prototype_file(path)
        if doc is None:
            continue

        for node in doc:
            if not _is_relevant(node):
                continue
            ptype = node["type"]
            if ptype == "entity":
                raw.entities[node["id"]] = EntityPrototype.from_dict(node)
            elif ptype == "reagent":
                raw.reagents[node["id"]] = ReagentPrototype.from_dict(node)
            elif ptype == "stack":
                raw.stacks[node["id"]] = StackPrototype.from_dict(node)
            elif ptype == "constructionGraph":
                raw.construction_graphs[node["id"]] = ConstructionGraphPrototype.from_dict(node)
            elif ptype == "microwaveMealRecipe":
                raw.recipes.append(MicrowaveMealRecipe.from_dict(node))
            elif ptype == "reaction":
                raw.reactions.append(ReactionPrototype.from_dict(node))
    return raw
