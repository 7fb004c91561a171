# -*- coding: utf-8 -*-
"""Relevance filter.

Computes the smallest set of entities, reagents and recipes a fork's
cookbook has to ship. Declared microwave recipes seed the build; from there
two worklists grow it until nothing new turns up:

1. Entities. When an entity becomes used, every entity that can be cut or
   rolled into it gets a special recipe and becomes used itself. Heating and
   deep-frying do not need a used result, so those recipes are added up
   front for every entity that supports them.
2. Reagents. When a reagent (or an entity) becomes used, the reactions that
   produce it are accepted and their reactants become used in turn.

Reagent sources are indexed once afterwards. An entity that only shows up as
a source never feeds back into the worklists.

Special recipe keys are `{method}!{entityId}`, reactions are keyed by the
normalizer. The first recipe stored under a key is kept.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, FrozenSet, List, Mapping, Optional, Set, Tuple

from cookbook.errors import UnresolvedPrototypeError
from cookbook.indexers.construction import traverse_construction_graph
from cookbook.indexers.reactions import (
    get_reagent_result,
    get_solid_result,
    is_food_related_reagent,
    is_mixable,
)
from cookbook.indexers.reagent_sources import index_reagent_sources
from cookbook.indexers.shared import UsedSet
from cookbook.inheritance import resolve_entities
from cookbook.schemas.prototypes import (
    MicrowaveMealRecipe,
    RawGameData,
    ReactionPrototype,
    ReagentPrototype,
)
from cookbook.schemas.resolved import (
    CutRecipe,
    DeepFryRecipe,
    ResolvedEntity,
    ResolvedRecipe,
)

__all__ = ["FilterOptions", "PrunedGameData", "filter_relevant_prototypes", "special_recipe_key"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOptions:
    ignored_recipes: FrozenSet[str] = frozenset()
    ignored_special_recipes: FrozenSet[str] = frozenset()
    # Reagents too common to list sources for (water, blood...).
    ignore_sources_of: FrozenSet[str] = frozenset()
    force_include_reagent_sources: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    # Entities shipped regardless of recipes, e.g. special diet organs.
    extra_entities: Tuple[str, ...] = ()


@dataclass
class PrunedGameData:
    entities: Dict[str, ResolvedEntity]
    reagents: Dict[str, ReagentPrototype]
    recipes: List[MicrowaveMealRecipe]
    reactions: List[ReactionPrototype]
    special_recipes: Dict[str, ResolvedRecipe]
    reagent_sources: Dict[str, List[str]]

    def summary(self) -> Dict[str, int]:
        return {
            "entities": len(self.entities),
            "reagents": len(self.reagents),
            "recipes": len(self.recipes),
            "reactions": len(self.reactions),
            "special_recipes": len(self.special_recipes),
            "reagent_sources": len(self.reagent_sources),
        }


def special_recipe_key(recipe: ResolvedRecipe, entity_id: str) -> str:
    return f"{recipe.method}!{entity_id}"


class _Closure:
    def __init__(
        self,
        raw: RawGameData,
        resolved: Mapping[str, ResolvedEntity],
        options: FilterOptions,
    ):
        self.raw = raw
        self.resolved = resolved
        self.options = options

        self.used_entities = UsedSet()
        self.used_reagents = UsedSet()
        self.special_recipes: Dict[str, ResolvedRecipe] = {}
        self.recipes: List[MicrowaveMealRecipe] = []

        self._entity_queue: Deque[str] = deque()
        self._reagent_queue: Deque[str] = deque()

        # slice target -> entities that can be cut into it
        self._slice_sources: Dict[str, List[str]] = defaultdict(list)
        # roll target -> (source entity, recipe)
        self._roll_sources: Dict[str, List[Tuple[str, ResolvedRecipe]]] = defaultdict(list)
        # recipes that need no used result: (source entity, recipe)
        self._unconditional: List[Tuple[str, ResolvedRecipe]] = []

        self._index_entities()

    # ---------------------------------------------------------
    # Marking
    # ---------------------------------------------------------

    def mark_entity(self, entity_id: str) -> None:
        if self.used_entities.add(entity_id):
            self._entity_queue.append(entity_id)

    def mark_reagent(self, reagent_id: str) -> None:
        if self.used_reagents.add(reagent_id):
            self._reagent_queue.append(reagent_id)

    def add_special(self, source_id: str, recipe: ResolvedRecipe) -> bool:
        key = special_recipe_key(recipe, source_id)
        if key in self.special_recipes or key in self.options.ignored_special_recipes:
            return False
        self.special_recipes[key] = recipe
        self.mark_entity(source_id)
        if recipe.solid_result is not None:
            self.mark_entity(recipe.solid_result)
        logger.debug("Special recipe %s -> %s", key, recipe.solid_result)
        return True

    # ---------------------------------------------------------
    # Indices
    # ---------------------------------------------------------

    def _index_entities(self) -> None:
        for eid, ent in self.resolved.items():
            sliceable = ent.sliceable_food
            if sliceable is not None and sliceable.slice:
                self._slice_sources[sliceable.slice].append(eid)

            for recipe in traverse_construction_graph(eid, ent.construction, self.raw.construction_graphs):
                if recipe.method == "roll":
                    self._roll_sources[recipe.solid_result].append((eid, recipe))
                else:
                    self._unconditional.append((eid, recipe))

            if ent.deep_fry_output:
                self._unconditional.append(
                    (eid, DeepFryRecipe(solid_result=ent.deep_fry_output, solids={eid: 1}))
                )

    # ---------------------------------------------------------
    # Phases
    # ---------------------------------------------------------

    def seed(self, construct_recipes: Mapping[str, ResolvedRecipe]) -> None:
        for recipe in self.raw.recipes:
            if recipe.id in self.options.ignored_recipes:
                continue
            self.mark_entity(recipe.result)
            for solid_id in recipe.solids:
                stack = self.raw.stacks.get(solid_id)
                self.mark_entity(stack.spawn if stack is not None else solid_id)
            for reagent_id in recipe.reagents:
                self.mark_reagent(reagent_id)
            self.recipes.append(recipe)

        for key, recipe in construct_recipes.items():
            if key in self.options.ignored_special_recipes or key in self.special_recipes:
                continue
            self.special_recipes[key] = recipe
            for solid_id in recipe.solids:
                self.mark_entity(solid_id)
            for reagent_id in recipe.reagents:
                self.mark_reagent(reagent_id)
            if recipe.solid_result is not None:
                self.mark_entity(recipe.solid_result)
            if recipe.reagent_result is not None:
                self.mark_reagent(recipe.reagent_result)

    def expand_entities(self) -> None:
        for source_id, recipe in self._unconditional:
            self.add_special(source_id, recipe)

        while self._entity_queue:
            entity_id = self._entity_queue.popleft()
            for source_id in self._slice_sources.get(entity_id, ()):
                count = self.resolved[source_id].sliceable_food.count
                self.add_special(
                    source_id,
                    CutRecipe(solid_result=entity_id, solids={source_id: 1}, max_count=count),
                )
            for source_id, recipe in self._roll_sources.get(entity_id, ()):
                self.add_special(source_id, recipe)

    def expand_reactions(self) -> List[ReactionPrototype]:
        by_reagent: Dict[str, List[int]] = defaultdict(list)
        by_solid: Dict[str, List[int]] = defaultdict(list)
        for i, reaction in enumerate(self.raw.reactions):
            if not is_mixable(reaction):
                continue
            reagent_result = get_reagent_result(reaction)
            solid_result = get_solid_result(reaction)
            # Exactly one of the two, never both and never neither.
            if (reagent_result is None) == (solid_result is None):
                continue
            if reagent_result is not None:
                reagent_id = reagent_result[0]
                if is_food_related_reagent(self.raw.reagents.get(reagent_id)):
                    by_reagent[reagent_id].append(i)
            else:
                by_solid[solid_result].append(i)

        accepted: Set[int] = set()
        # A reaction ID is taken by the first copy that gets accepted.
        accepted_ids: Set[str] = set()

        def accept(index: int) -> None:
            reaction_id = self.raw.reactions[index].id
            if index in accepted or reaction_id in accepted_ids:
                return
            accepted.add(index)
            accepted_ids.add(reaction_id)
            for reactant_id in self.raw.reactions[index].reactants:
                self.mark_reagent(reactant_id)

        for entity_id in list(self.used_entities):
            for index in by_solid.get(entity_id, ()):
                accept(index)

        while self._reagent_queue:
            reagent_id = self._reagent_queue.popleft()
            for index in by_reagent.get(reagent_id, ()):
                accept(index)

        return [self.raw.reactions[i] for i in sorted(accepted)]


def filter_relevant_prototypes(
    raw: RawGameData,
    options: Optional[FilterOptions] = None,
    *,
    construct_recipes: Optional[Mapping[str, ResolvedRecipe]] = None,
    resolved: Optional[Mapping[str, ResolvedEntity]] = None,
) -> PrunedGameData:
    """Prune `raw` down to what the declared recipes need.

    `resolved` may carry pre-resolved entities for every raw entity; it is
    computed when omitted. Raises `UnresolvedPrototypeError` when a used ID
    has no prototype.
    """
    options = options or FilterOptions()
    if resolved is None:
        resolved = resolve_entities(raw.entities)

    closure = _Closure(raw, resolved, options)
    closure.seed(construct_recipes or {})
    closure.expand_entities()
    reactions = closure.expand_reactions()

    reagent_sources = index_reagent_sources(
        resolved.values(),
        closure.used_reagents,
        closure.used_entities,
        ignore_sources_of=options.ignore_sources_of,
        force_include=options.force_include_reagent_sources,
    )

    for entity_id in options.extra_entities:
        closure.used_entities.add(entity_id)

    entities: Dict[str, ResolvedEntity] = {}
    for entity_id in closure.used_entities:
        entity = resolved.get(entity_id)
        if entity is None:
            raise UnresolvedPrototypeError("entity", entity_id)
        entities[entity_id] = entity

    reagents: Dict[str, ReagentPrototype] = {}
    for reagent_id in closure.used_reagents:
        reagent = raw.reagents.get(reagent_id)
        if reagent is None:
            raise UnresolvedPrototypeError("reagent", reagent_id)
        reagents[reagent_id] = reagent

    return PrunedGameData(
        entities=entities,
        reagents=reagents,
        recipes=closure.recipes,
        reactions=reactions,
        special_recipes=closure.special_recipes,
        reagent_sources=reagent_sources,
    )
