# -*- coding: utf-8 -*-
"""Builder for multi-step `construct` recipes.

Steps are recorded in order as camelCase dicts (the shape the front-end
renders). Solid and reagent ingredients are collected from the steps as
they are pushed.

Usage:
    recipe = (
        ConstructRecipeBuilder(group="Breakfast")
        .start_with("FoodPlate")
        .add(["FoodEgg", "FoodBacon"])
        .heat(373)
        .with_solid_result("FoodBreakfast")
        .to_recipe()
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from cookbook.config.forks import ConstructRecipeDef
from cookbook.constants import DEFAULT_RECIPE_GROUP
from cookbook.errors import RecipeShapeError
from cookbook.schemas.resolved import ConstructRecipe, ReagentIngredient

__all__ = ["ConstructRecipeBuilder", "main_verb", "build_declared_construct_recipe"]

# step type -> verb it counts as
_STEP_VERBS: Dict[str, str] = {
    "mix": "mix",
    "heat": "heat",
    "cut": "cut",
    "roll": "roll",
    "heatMixture": "heat",
    "stir": "mix",
    "shake": "mix",
}


def main_verb(steps: Sequence[Mapping[str, Any]]) -> Optional[str]:
    """The one verb all verb-carrying steps agree on, or None."""
    result: Optional[str] = None
    for step in steps:
        verb = _STEP_VERBS.get(step.get("type", ""))
        if verb is None:
            continue
        if result is not None and result != verb:
            return None
        result = verb
    return result


OneOrMoreEntities = Union[str, Sequence[str]]


class ConstructRecipeBuilder:
    def __init__(self, group: str = DEFAULT_RECIPE_GROUP):
        self.group = group
        self.solid_result: Optional[str] = None
        self.reagent_result: Optional[str] = None
        self.result_qty: Optional[float] = None
        self.solid_ingredients: Dict[str, float] = {}
        self.reagent_ingredients: Dict[str, ReagentIngredient] = {}
        self.steps: List[Dict[str, Any]] = []

    def to_recipe(self) -> ConstructRecipe:
        if not self.solid_result and not self.reagent_result:
            raise RecipeShapeError("Recipe has neither solid nor reagent result")
        return ConstructRecipe(
            solid_result=self.solid_result,
            reagent_result=self.reagent_result,
            result_qty=self.result_qty,
            solids=dict(self.solid_ingredients),
            reagents=dict(self.reagent_ingredients),
            group=self.group,
            main_verb=main_verb(self.steps),
            steps=tuple(dict(s) for s in self.steps),
        )

    # ---------------------------------------------------------
    # Results
    # ---------------------------------------------------------

    def with_solid_result(self, entity_id: str) -> "ConstructRecipeBuilder":
        if self.reagent_result:
            raise RecipeShapeError("Recipe can't have both solid and reagent result")
        self.solid_result = entity_id
        return self

    def with_reagent_result(self, reagent_id: str) -> "ConstructRecipeBuilder":
        if self.solid_result:
            raise RecipeShapeError("Recipe can't have both solid and reagent result")
        self.reagent_result = reagent_id
        return self

    def with_result_qty(self, qty: float) -> "ConstructRecipeBuilder":
        self.result_qty = qty
        return self

    # ---------------------------------------------------------
    # Steps
    # ---------------------------------------------------------

    def push_step(self, step: Dict[str, Any]) -> "ConstructRecipeBuilder":
        self.steps.append(step)
        self._collect_ingredients(step)
        return self

    def start_with(self, entity: str) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "start", "entity": entity})

    def end_with(self, entity: str) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "end", "entity": entity})

    def mix(self, reagents: Mapping[str, Any]) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "mix", "reagents": dict(reagents)})

    def add(
        self,
        entity: OneOrMoreEntities,
        min_count: Optional[int] = None,
        max_count: Optional[int] = None,
    ) -> "ConstructRecipeBuilder":
        step: Dict[str, Any] = {"type": "add", "entity": entity if isinstance(entity, str) else list(entity)}
        if min_count is not None:
            step["minCount"] = min_count
        if max_count is not None:
            step["maxCount"] = max_count
        return self.push_step(step)

    def heat(self, min_temp: float) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "heat", "minTemp": min_temp})

    def heat_mixture(self, min_temp: float, max_temp: Optional[float] = None) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "heatMixture", "minTemp": min_temp, "maxTemp": max_temp})

    def cut(self) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "cut"})

    def roll(self) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "roll"})

    def stir(self) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "stir"})

    def shake(self) -> "ConstructRecipeBuilder":
        return self.push_step({"type": "shake"})

    def _collect_ingredients(self, step: Mapping[str, Any]) -> None:
        stype = step.get("type")
        if stype in ("start", "end"):
            self.solid_ingredients[step["entity"]] = 1
        elif stype == "add":
            entity = step["entity"]
            for eid in ([entity] if isinstance(entity, str) else entity):
                self.solid_ingredients[eid] = 1
        elif stype == "mix":
            for rid in step["reagents"]:
                # Amounts are not shown for construct recipes.
                self.reagent_ingredients[rid] = ReagentIngredient()


def build_declared_construct_recipe(definition: ConstructRecipeDef) -> ConstructRecipe:
    """Build a recipe from a construct recipe of the fork list."""
    builder = ConstructRecipeBuilder(group=definition.group or DEFAULT_RECIPE_GROUP)
    if definition.solid_result and definition.reagent_result:
        raise RecipeShapeError("Recipe can't have both solid and reagent result")
    for step in definition.steps:
        stype = step.type
        if stype == "start":
            builder.start_with(step.entity)
        elif stype == "end":
            builder.end_with(step.entity)
        elif stype == "add":
            builder.add(step.entity, step.min_count, step.max_count)
        elif stype == "mix":
            builder.mix(step.reagents or {})
        elif stype == "heat":
            builder.heat(step.min_temp)
        elif stype == "heatMixture":
            builder.heat_mixture(step.min_temp, step.max_temp)
        elif stype == "cut":
            builder.cut()
        elif stype == "roll":
            builder.roll()
        elif stype == "stir":
            builder.stir()
        elif stype == "shake":
            builder.shake()
    if definition.solid_result:
        builder.with_solid_result(definition.solid_result)
    if definition.reagent_result:
        builder.with_reagent_result(definition.reagent_result)
    if definition.result_qty is not None:
        builder.with_result_qty(definition.result_qty)
    return builder.to_recipe()
