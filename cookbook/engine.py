# -*- coding: utf-8 -*-
"""CookbookEngine

Runs the build for one fork, from the game checkout to a
`ProcessedGameData` ready for the serializer:

    prototype files -> raw game data -> resolved entities
    -> relevance filter -> recipes + reagents -> specials -> sprite sheet

The engine never writes anything; see `cookbook.serializer` for that.
Missing prototypes abort the build with `UnresolvedPrototypeError`.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from cookbook.assets.sprite_sheet import SpriteSheet, build_sprite_sheet
from cookbook.config.forks import ForkInfo, MicrowaveRecipeType
from cookbook.constants import LOCALE_SUBPATH, PROTOTYPES_SUBPATH, TEXTURES_SUBPATH
from cookbook.construct_recipes import build_declared_construct_recipe
from cookbook.errors import UnresolvedPrototypeError
from cookbook.indexers.closure import PrunedGameData, filter_relevant_prototypes
from cookbook.indexers.recipes import normalize_recipes, resolve_reagents
from cookbook.indexers.specials import ResolvedSpecial, resolve_specials
from cookbook.inheritance import resolve_entities
from cookbook.parsers.locale import LocaleCatalog
from cookbook.parsers.prototypes import find_prototype_files, load_yaml_file, read_raw_game_data
from cookbook.schemas.prototypes import RawGameData
from cookbook.schemas.resolved import ResolvedEntity, ResolvedReagent, ResolvedRecipe

__all__ = [
    "CookbookEngine",
    "ProcessedGameData",
    "build_fork",
    "git_commit_hash",
    "read_sorting_id_rewrites",
]

logger = logging.getLogger(__name__)

UNKNOWN_COMMIT = "unknown"


@dataclass
class ProcessedGameData:
    id: str
    name: str
    description: str
    default: bool
    hidden: bool
    repo: str
    commit_hash: str
    entities: Dict[str, ResolvedEntity]
    reagents: Dict[str, ResolvedReagent]
    recipes: Dict[str, ResolvedRecipe]
    reagent_sources: Dict[str, List[str]]
    specials: List[ResolvedSpecial]
    sprites: SpriteSheet
    microwave_recipe_types: Optional[Dict[str, MicrowaveRecipeType]]
    sorting_id_rewrites: Dict[str, str]


def git_commit_hash(repo_dir: Path) -> str:
    try:
        out = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=str(repo_dir),
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning("Could not read git commit of %s: %s", repo_dir, e)
        return UNKNOWN_COMMIT
    return out.stdout.strip() or UNKNOWN_COMMIT


def read_sorting_id_rewrites(paths: Sequence[Path], entities: Mapping[str, object]) -> Dict[str, str]:
    """Merge rewrite files in order; later files win."""
    result: Dict[str, str] = {}
    for path in paths:
        rewrites = load_yaml_file(path) or {}
        if not isinstance(rewrites, dict):
            logger.warning("%s: Rewrite file is not a mapping, skipped", path)
            continue
        for key, value in rewrites.items():
            key = str(key)
            if key not in entities:
                logger.warning("Unknown entity prototype ID in rewrite file: %s", key)
            result[key] = str(value)
    return result


class CookbookEngine:
    """Build one fork.

    Parameters
    - fork_id: ID used in output file names.
    - fork: validated fork settings.
    - base_dir: directory relative fork and rewrite paths are resolved
      against (normally the fork list's directory).
    """

    def __init__(self, fork_id: str, fork: ForkInfo, base_dir: Optional[Path] = None):
        self.fork_id = fork_id
        self.fork = fork
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.root = fork.resolve_path(self.base_dir)

        self.raw: Optional[RawGameData] = None
        self.resolved: Optional[Dict[str, ResolvedEntity]] = None
        self.pruned: Optional[PrunedGameData] = None

    # ---------------------------------------------------------
    # Paths
    # ---------------------------------------------------------

    @property
    def prototype_dir(self) -> Path:
        return self.root / PROTOTYPES_SUBPATH

    @property
    def locale_dir(self) -> Path:
        return self.root / LOCALE_SUBPATH

    @property
    def texture_dir(self) -> Path:
        return self.root / TEXTURES_SUBPATH

    def rewrite_paths(self) -> List[Path]:
        out: List[Path] = []
        for p in self.fork.sorting_id_rewrites:
            path = Path(p).expanduser()
            out.append(path if path.is_absolute() else self.base_dir / path)
        return out

    # ---------------------------------------------------------
    # Stages
    # ---------------------------------------------------------

    def load(self) -> RawGameData:
        paths = find_prototype_files(self.prototype_dir)
        logger.info("Found %d files", len(paths))

        self.raw = read_raw_game_data(paths)
        s = self.raw.summary()
        logger.info(
            "Loaded %d entities, %d reagents, %d microwave meal recipes, %d reactions, %d stacks",
            s["entities"],
            s["reagents"],
            s["recipes"],
            s["reactions"],
            s["stacks"],
        )
        self.resolved = resolve_entities(self.raw.entities)
        return self.raw

    def construct_recipes(self) -> Dict[str, ResolvedRecipe]:
        return {
            f"construct!{rid}": build_declared_construct_recipe(definition)
            for rid, definition in self.fork.construct_recipes.items()
        }

    def filter(self) -> PrunedGameData:
        if self.raw is None or self.resolved is None:
            self.load()
        assert self.raw is not None and self.resolved is not None

        self.pruned = filter_relevant_prototypes(
            self.raw,
            self.fork.filter_options(),
            construct_recipes=self.construct_recipes(),
            resolved=self.resolved,
        )
        s = self.pruned.summary()
        logger.info(
            "%d recipes use %d entities, %d reagents, %d reactions, %d special recipes",
            s["recipes"],
            s["entities"],
            s["reagents"],
            s["reactions"],
            s["special_recipes"],
        )
        return self.pruned

    def recipes(self) -> Dict[str, ResolvedRecipe]:
        pruned = self.pruned if self.pruned is not None else self.filter()
        return normalize_recipes(pruned, self.fork.default_microwave_recipe_type())

    def method_entities(self) -> Dict[str, ResolvedEntity]:
        assert self.resolved is not None
        out: Dict[str, ResolvedEntity] = {}
        for method, entity_id in self.fork.method_entities.items():
            if entity_id is None:
                # Unsupported on this fork.
                continue
            out[method] = self._entity(entity_id)
        return out

    def microwave_type_entities(self) -> Optional[Dict[str, ResolvedEntity]]:
        types = self.fork.microwave_recipe_types
        if types is None:
            return None
        return {subtype: self._entity(data.machine) for subtype, data in types.items()}

    def _entity(self, entity_id: str) -> ResolvedEntity:
        assert self.resolved is not None
        entity = self.resolved.get(entity_id)
        if entity is None:
            raise UnresolvedPrototypeError("entity", entity_id)
        return entity

    def build(self) -> ProcessedGameData:
        logger.info("Starting work on fork %s: %s...", self.fork_id, self.fork.name)
        commit = git_commit_hash(self.root)
        logger.info("Generating data from commit: %s", commit)

        pruned = self.filter()
        recipes = self.recipes()
        reagents = resolve_reagents(pruned.reagents, LocaleCatalog.load(self.locale_dir))
        method_entities = self.method_entities()
        microwave_type_entities = self.microwave_type_entities()
        logger.info(
            "Resolved %d entities, %d reagents and %d recipes",
            len(pruned.entities),
            len(reagents),
            len(recipes),
        )

        specials = resolve_specials(
            pruned.entities,
            self.fork.special_diets,
            self.fork.special_reagents,
        )
        logger.info("Resolved %d special diets and reagents", len(specials))

        rewrites = read_sorting_id_rewrites(self.rewrite_paths(), pruned.entities)

        sprites = build_sprite_sheet(
            pruned.entities,
            method_entities,
            self.texture_dir,
            self.fork.mix_fill_state,
            microwave_type_entities,
        )
        logger.info("Built sprite sheet for %d sprites", len(sprites.points))
        logger.info("Finished building %s", self.fork_id)

        return ProcessedGameData(
            id=self.fork_id,
            name=self.fork.name,
            description=self.fork.description,
            default=self.fork.default,
            hidden=self.fork.hidden,
            repo=self.fork.repo,
            commit_hash=commit,
            entities=pruned.entities,
            reagents=reagents,
            recipes=recipes,
            reagent_sources=pruned.reagent_sources,
            specials=specials,
            sprites=sprites,
            microwave_recipe_types=self.fork.microwave_recipe_types,
            sorting_id_rewrites=rewrites,
        )


def build_fork(fork_id: str, fork: ForkInfo, base_dir: Optional[Path] = None) -> ProcessedGameData:
    return CookbookEngine(fork_id, fork, base_dir).build()
