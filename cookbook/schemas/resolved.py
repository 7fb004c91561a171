# -*- coding: utf-8 -*-
"""Resolved records produced by the build.

A resolved entity is the flattened view of an entity prototype and all of its
ancestors, reduced to the data the cookbook actually reads. Resolution happens
once per build, after which the records are never mutated.

Recipes are keyed by ID in the owning collection, so no record here stores
its own ID. `to_dict()` emits the camelCase shape shipped to the front-end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Tuple, Union

from cookbook.constants import (
    DEFAULT_COOK_TIME,
    DEFAULT_FOOD_SEQUENCE_MAX_LAYERS,
    DEFAULT_RECIPE_GROUP,
    DEFAULT_TOTAL_SLICE_COUNT,
)
from cookbook.schemas.prototypes import Solution


# =========================================================
# Entities
# =========================================================

@dataclass(frozen=True)
class ResolvedSpriteLayer:
    path: Optional[str] = None
    state: Optional[str] = None
    color: Optional[str] = None
    visible: bool = True


@dataclass(frozen=True)
class ResolvedSprite:
    path: Optional[str] = None
    state: Optional[str] = None
    color: Optional[str] = None
    layers: Tuple[ResolvedSpriteLayer, ...] = ()


@dataclass(frozen=True)
class ResolvedExtractable:
    grind_solution_name: Optional[str] = None
    juice_solution: Optional[Solution] = None


@dataclass(frozen=True)
class ResolvedSlice:
    slice: Optional[str] = None
    count: int = DEFAULT_TOTAL_SLICE_COUNT


@dataclass(frozen=True)
class ResolvedConstruction:
    graph: Optional[str] = None
    node: Optional[str] = None
    edge: Optional[int] = None
    step: Optional[int] = None


@dataclass(frozen=True)
class ResolvedStomach:
    tags: Optional[Tuple[str, ...]] = None
    components: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class ResolvedFoodSequenceStart:
    key: Optional[str] = None
    max_layers: int = DEFAULT_FOOD_SEQUENCE_MAX_LAYERS


@dataclass(frozen=True)
class ResolvedEntity:
    id: str
    name: str
    is_produce: bool = False
    sprite: ResolvedSprite = field(default_factory=ResolvedSprite)
    # Solution name -> solution. None when the entity has no solution container.
    solutions: Optional[Dict[str, Solution]] = None
    # Reagent IDs of the `food` solution.
    reagents: FrozenSet[str] = frozenset()
    extractable: Optional[ResolvedExtractable] = None
    food_sequence_start: Optional[ResolvedFoodSequenceStart] = None
    food_sequence_element: Tuple[str, ...] = ()
    sliceable_food: Optional[ResolvedSlice] = None
    construction: Optional[ResolvedConstruction] = None
    deep_fry_output: Optional[str] = None
    stomach: Optional[ResolvedStomach] = None
    tags: FrozenSet[str] = frozenset()
    components: FrozenSet[str] = frozenset()

    def has_component(self, name: str) -> bool:
        return name in self.components


@dataclass(frozen=True)
class ResolvedReagent:
    name: str
    color: str


# =========================================================
# Recipes
# =========================================================

@dataclass(frozen=True)
class ReagentIngredient:
    # Construct recipes leave the amount unset; it is never displayed.
    amount: Optional[float] = None
    catalyst: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.amount is not None:
            out["amount"] = self.amount
        if self.catalyst:
            out["catalyst"] = True
        return out


SubtypeValue = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class ResolvedRecipe:
    method: ClassVar[str] = ""

    solid_result: Optional[str] = None
    reagent_result: Optional[str] = None
    result_qty: Optional[float] = None
    solids: Dict[str, float] = field(default_factory=dict)
    reagents: Dict[str, ReagentIngredient] = field(default_factory=dict)
    group: str = DEFAULT_RECIPE_GROUP

    def _extra_fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self, recipe_id: Optional[str] = None) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if recipe_id is not None:
            out["id"] = recipe_id
        out["method"] = self.method
        out["solidResult"] = self.solid_result
        out["reagentResult"] = self.reagent_result
        if self.result_qty is not None:
            out["resultQty"] = self.result_qty
        out["solids"] = dict(self.solids)
        out["reagents"] = {k: v.to_dict() for k, v in self.reagents.items()}
        out["group"] = self.group
        out.update(self._extra_fields())
        return out


@dataclass(frozen=True)
class MicrowaveRecipe(ResolvedRecipe):
    method: ClassVar[str] = "microwave"

    time: float = DEFAULT_COOK_TIME
    # Frontier: restricts the recipe to certain machines.
    subtype: Optional[SubtypeValue] = None

    def _extra_fields(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"time": self.time}
        if self.subtype is not None:
            out["subtype"] = list(self.subtype) if isinstance(self.subtype, tuple) else self.subtype
        return out


@dataclass(frozen=True)
class MixRecipe(ResolvedRecipe):
    method: ClassVar[str] = "mix"

    result_amount: float = 0
    min_temp: float = 0
    max_temp: Optional[float] = None

    def _extra_fields(self) -> Dict[str, Any]:
        return {"resultAmount": self.result_amount, "minTemp": self.min_temp, "maxTemp": self.max_temp}


@dataclass(frozen=True)
class CutRecipe(ResolvedRecipe):
    method: ClassVar[str] = "cut"

    max_count: int = DEFAULT_TOTAL_SLICE_COUNT

    def _extra_fields(self) -> Dict[str, Any]:
        return {"maxCount": self.max_count}


@dataclass(frozen=True)
class RollRecipe(ResolvedRecipe):
    method: ClassVar[str] = "roll"


@dataclass(frozen=True)
class HeatRecipe(ResolvedRecipe):
    method: ClassVar[str] = "heat"

    min_temp: float = 0

    def _extra_fields(self) -> Dict[str, Any]:
        return {"minTemp": self.min_temp}


@dataclass(frozen=True)
class DeepFryRecipe(ResolvedRecipe):
    method: ClassVar[str] = "deepFry"


@dataclass(frozen=True)
class ConstructRecipe(ResolvedRecipe):
    method: ClassVar[str] = "construct"

    main_verb: Optional[str] = None
    steps: Tuple[Dict[str, Any], ...] = ()

    def _extra_fields(self) -> Dict[str, Any]:
        return {"mainVerb": self.main_verb, "steps": [dict(s) for s in self.steps]}
