# -*- coding: utf-8 -*-
"""Entity inheritance resolution.

An entity prototype may name one or more parents. The resolved view of an
entity is built by applying every prototype in its ancestor chain, root
first, to a mutable `EntityBuilder`:

- scalar fields are overwritten only by values that are actually set;
- sprite layers merge by index;
- tag lists and stomach whitelists are replaced wholesale;
- the set of component names grows with every prototype.

The builder is frozen into a `ResolvedEntity` when the walk is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Set

from cookbook.constants import (
    DEFAULT_FOOD_SEQUENCE_MAX_LAYERS,
    DEFAULT_TOTAL_SLICE_COUNT,
    FOOD_SOLUTION_NAME,
    UNKNOWN_ENTITY_NAME,
)
from cookbook.schemas.prototypes import (
    Component,
    ConstructionComponent,
    DeepFrySpawnComponent,
    EntityPrototype,
    ExtractableComponent,
    FoodSequenceElementComponent,
    FoodSequenceStartPointComponent,
    OtherComponent,
    ProduceComponent,
    SliceableFoodComponent,
    Solution,
    SolutionContainerManagerComponent,
    SpriteComponent,
    StomachComponent,
    TagComponent,
    component_type,
)
from cookbook.schemas.resolved import (
    ResolvedConstruction,
    ResolvedEntity,
    ResolvedExtractable,
    ResolvedFoodSequenceStart,
    ResolvedSlice,
    ResolvedSprite,
    ResolvedSpriteLayer,
    ResolvedStomach,
)

logger = logging.getLogger(__name__)


# =========================================================
# Ancestor walk
# =========================================================

def entity_and_ancestors(
    entity: EntityPrototype,
    all_entities: Mapping[str, EntityPrototype],
) -> Iterator[EntityPrototype]:
    """Yield the ancestor chain root first, ending with `entity` itself.

    Parents are processed in listed order, each with its own ancestors before
    it. A prototype reachable through several parents is yielded once, at
    its first position.
    """
    seen: Set[str] = set()
    out: List[EntityPrototype] = []

    def visit(proto: EntityPrototype, stack: Set[str]) -> None:
        if proto.id in seen:
            return
        if proto.id in stack:
            logger.warning("Entity '%s': inheritance cycle, ignoring back edge", proto.id)
            return
        stack.add(proto.id)
        for parent_id in proto.parents:
            parent = all_entities.get(parent_id)
            if parent is None:
                logger.warning("Entity '%s': unknown parent '%s'", proto.id, parent_id)
                continue
            visit(parent, stack)
        stack.discard(proto.id)
        seen.add(proto.id)
        out.append(proto)

    visit(entity, set())
    return iter(out)


# =========================================================
# Builder
# =========================================================

@dataclass
class _LayerDraft:
    path: Optional[str] = None
    state: Optional[str] = None
    color: Optional[str] = None
    visible: bool = True


@dataclass
class EntityBuilder:
    id: str
    name: str = UNKNOWN_ENTITY_NAME
    is_produce: bool = False
    sprite_path: Optional[str] = None
    sprite_state: Optional[str] = None
    sprite_color: Optional[str] = None
    sprite_layers: List[_LayerDraft] = field(default_factory=list)
    solutions: Optional[Dict[str, Solution]] = None
    extractable: Optional[Dict[str, object]] = None
    food_sequence_start: Optional[Dict[str, object]] = None
    food_sequence_element: List[str] = field(default_factory=list)
    sliceable_food: Optional[Dict[str, object]] = None
    construction: Optional[Dict[str, object]] = None
    deep_fry_output: Optional[str] = None
    stomach: Optional[Dict[str, object]] = None
    tags: Set[str] = field(default_factory=set)
    components: Set[str] = field(default_factory=set)

    def apply(self, proto: EntityPrototype) -> None:
        if proto.name is not None:
            self.name = proto.name
        for comp in proto.components:
            self.components.add(component_type(comp))
            handler = _HANDLERS.get(type(comp))
            if handler is not None:
                handler(self, comp, proto.id)

    def build(self) -> ResolvedEntity:
        food_reagents: frozenset = frozenset()
        if self.solutions is not None:
            food = self.solutions.get(FOOD_SOLUTION_NAME)
            if food is not None and food.reagents is not None:
                food_reagents = frozenset(food.reagent_ids())

        return ResolvedEntity(
            id=self.id,
            name=self.name,
            is_produce=self.is_produce,
            sprite=ResolvedSprite(
                path=self.sprite_path,
                state=self.sprite_state,
                color=self.sprite_color,
                layers=tuple(
                    ResolvedSpriteLayer(path=l.path, state=l.state, color=l.color, visible=l.visible)
                    for l in self.sprite_layers
                ),
            ),
            solutions=dict(self.solutions) if self.solutions is not None else None,
            reagents=food_reagents,
            extractable=ResolvedExtractable(**self.extractable) if self.extractable is not None else None,
            food_sequence_start=(
                ResolvedFoodSequenceStart(**self.food_sequence_start)
                if self.food_sequence_start is not None
                else None
            ),
            food_sequence_element=tuple(self.food_sequence_element),
            sliceable_food=ResolvedSlice(**self.sliceable_food) if self.sliceable_food is not None else None,
            construction=ResolvedConstruction(**self.construction) if self.construction is not None else None,
            deep_fry_output=self.deep_fry_output,
            stomach=ResolvedStomach(**self.stomach) if self.stomach is not None else None,
            tags=frozenset(self.tags),
            components=frozenset(self.components),
        )


def _overwrite(target: Dict[str, object], **values: object) -> None:
    for key, value in values.items():
        if value is not None:
            target[key] = value


def _apply_construction(b: EntityBuilder, comp: ConstructionComponent, _owner: str) -> None:
    if b.construction is None:
        b.construction = {"graph": None, "node": None, "edge": None, "step": None}
    _overwrite(b.construction, graph=comp.graph, node=comp.node, edge=comp.edge, step=comp.step)


def _apply_deep_fry(b: EntityBuilder, comp: DeepFrySpawnComponent, _owner: str) -> None:
    b.deep_fry_output = comp.output


def _apply_extractable(b: EntityBuilder, comp: ExtractableComponent, _owner: str) -> None:
    if b.extractable is None:
        b.extractable = {"grind_solution_name": None, "juice_solution": None}
    _overwrite(
        b.extractable,
        grind_solution_name=comp.grindable_solution_name,
        juice_solution=comp.juice_solution,
    )


def _apply_food_sequence_element(b: EntityBuilder, comp: FoodSequenceElementComponent, _owner: str) -> None:
    if comp.entries is not None:
        b.food_sequence_element = list(comp.entries.keys())


def _apply_food_sequence_start(b: EntityBuilder, comp: FoodSequenceStartPointComponent, _owner: str) -> None:
    if b.food_sequence_start is None:
        b.food_sequence_start = {"key": None, "max_layers": DEFAULT_FOOD_SEQUENCE_MAX_LAYERS}
    _overwrite(b.food_sequence_start, key=comp.key, max_layers=comp.max_layers)


def _apply_produce(b: EntityBuilder, _comp: ProduceComponent, _owner: str) -> None:
    b.is_produce = True


def _apply_sliceable(b: EntityBuilder, comp: SliceableFoodComponent, _owner: str) -> None:
    if b.sliceable_food is None:
        b.sliceable_food = {"slice": None, "count": DEFAULT_TOTAL_SLICE_COUNT}
    _overwrite(b.sliceable_food, slice=comp.slice, count=comp.count)


def _apply_solutions(b: EntityBuilder, comp: SolutionContainerManagerComponent, _owner: str) -> None:
    # The whole map is replaced, solutions are not merged by name.
    b.solutions = dict(comp.solutions) if comp.solutions is not None else None


def _apply_sprite(b: EntityBuilder, comp: SpriteComponent, _owner: str) -> None:
    if comp.sprite is not None:
        b.sprite_path = comp.sprite
    if comp.state is not None:
        b.sprite_state = comp.state
    if comp.color is not None:
        b.sprite_color = comp.color
    if comp.layers is None:
        return

    # Inherited layers past the end of the child's list are dropped.
    merged: List[_LayerDraft] = []
    for i, layer in enumerate(comp.layers):
        prev = b.sprite_layers[i] if i < len(b.sprite_layers) else _LayerDraft()
        if layer.sprite is not None:
            prev.path = layer.sprite
        if layer.state is not None:
            prev.state = layer.state
        if layer.visible is not None:
            prev.visible = layer.visible
        if layer.color is not None:
            prev.color = layer.color
        merged.append(prev)
    b.sprite_layers = merged


def _apply_stomach(b: EntityBuilder, comp: StomachComponent, owner: str) -> None:
    if b.stomach is None:
        b.stomach = {"tags": (), "components": ()}
    whitelist = comp.special_digestible
    if whitelist is None:
        return
    if whitelist.sizes:
        logger.warning("Entity '%s': Stomach has unsupported whitelist property: size", owner)
    if whitelist.tags is not None:
        b.stomach["tags"] = tuple(whitelist.tags)
    if whitelist.components is not None:
        b.stomach["components"] = tuple(whitelist.components)


def _apply_tags(b: EntityBuilder, comp: TagComponent, _owner: str) -> None:
    if comp.tags is not None:
        b.tags = set(comp.tags)


def _apply_other(_b: EntityBuilder, _comp: OtherComponent, _owner: str) -> None:
    pass


_HANDLERS: Dict[type, Callable[[EntityBuilder, Component, str], None]] = {
    ConstructionComponent: _apply_construction,
    DeepFrySpawnComponent: _apply_deep_fry,
    ExtractableComponent: _apply_extractable,
    FoodSequenceElementComponent: _apply_food_sequence_element,
    FoodSequenceStartPointComponent: _apply_food_sequence_start,
    ProduceComponent: _apply_produce,
    SliceableFoodComponent: _apply_sliceable,
    SolutionContainerManagerComponent: _apply_solutions,
    SpriteComponent: _apply_sprite,
    StomachComponent: _apply_stomach,
    TagComponent: _apply_tags,
    OtherComponent: _apply_other,
}


# =========================================================
# Public API
# =========================================================

def resolve_entity(entity: EntityPrototype, all_entities: Mapping[str, EntityPrototype]) -> ResolvedEntity:
    builder = EntityBuilder(id=entity.id)
    for proto in entity_and_ancestors(entity, all_entities):
        builder.apply(proto)
    return builder.build()


def resolve_entities(all_entities: Mapping[str, EntityPrototype]) -> Dict[str, ResolvedEntity]:
    """Resolve every entity prototype, abstract ones included."""
    return {eid: resolve_entity(proto, all_entities) for eid, proto in all_entities.items()}
