# -*- coding: utf-8 -*-
"""Recipe normalization.

Declared microwave recipes, accepted reactions and special recipes all end
up in one map of `ResolvedRecipe` records:

- microwave recipes keep their prototype ID;
- reactions are keyed `r!{reactionId}`;
- special recipes keep the `{method}!{entityId}` key given by the filter.

A key that is already taken is never overwritten.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Mapping, Optional

from cookbook.constants import DEFAULT_COOK_TIME, DEFAULT_REAGENT_COLOR, DEFAULT_RECIPE_GROUP
from cookbook.indexers.closure import PrunedGameData
from cookbook.indexers.reactions import get_reagent_result, get_solid_result
from cookbook.parsers.locale import LocaleCatalog
from cookbook.schemas.prototypes import MicrowaveMealRecipe, ReactionPrototype, ReagentPrototype
from cookbook.schemas.resolved import (
    MicrowaveRecipe,
    MixRecipe,
    ReagentIngredient,
    ResolvedReagent,
    ResolvedRecipe,
    SubtypeValue,
)

__all__ = [
    "microwave_recipe",
    "normalize_recipes",
    "reaction_key",
    "reaction_recipe",
    "resolve_reagents",
    "resolve_recipe_subtype",
]

logger = logging.getLogger(__name__)


def reaction_key(reaction_id: str) -> str:
    # Prefixed so that reactions never collide with microwave recipe IDs.
    return f"r!{reaction_id}"


def resolve_recipe_subtype(
    recipe: MicrowaveMealRecipe,
    default_subtype: Optional[str] = None,
) -> Optional[SubtypeValue]:
    subtype = recipe.recipe_type
    if isinstance(subtype, tuple):
        if len(subtype) == 0:
            return default_subtype
        if len(subtype) == 1:
            return subtype[0]
        return subtype
    return subtype if subtype is not None else default_subtype


def microwave_recipe(recipe: MicrowaveMealRecipe, default_subtype: Optional[str] = None) -> MicrowaveRecipe:
    return MicrowaveRecipe(
        solid_result=recipe.result,
        reagent_result=None,
        result_qty=recipe.result_count,
        solids=dict(recipe.solids),
        reagents={rid: ReagentIngredient(amount=amount) for rid, amount in recipe.reagents.items()},
        group=recipe.group or DEFAULT_RECIPE_GROUP,
        time=recipe.time if recipe.time is not None else DEFAULT_COOK_TIME,
        subtype=resolve_recipe_subtype(recipe, default_subtype),
    )


def reaction_recipe(reaction: ReactionPrototype) -> MixRecipe:
    reagent_result = get_reagent_result(reaction)
    max_temp = reaction.max_temp
    if max_temp is not None and not math.isfinite(max_temp):
        max_temp = None
    return MixRecipe(
        reagent_result=reagent_result[0] if reagent_result else None,
        solid_result=get_solid_result(reaction),
        result_amount=reagent_result[1] if reagent_result else 0,
        min_temp=reaction.min_temp if reaction.min_temp is not None else 0,
        max_temp=max_temp or None,
        solids={},
        reagents={
            rid: ReagentIngredient(amount=r.amount, catalyst=r.catalyst)
            for rid, r in reaction.reactants.items()
        },
        group=DEFAULT_RECIPE_GROUP,
    )


def _put(recipes: Dict[str, ResolvedRecipe], key: str, recipe: ResolvedRecipe) -> None:
    if key in recipes:
        logger.warning("Duplicate recipe ID %s (%s), keeping the first", key, recipe.method)
        return
    recipes[key] = recipe


def normalize_recipes(
    pruned: PrunedGameData,
    default_subtype: Optional[str] = None,
) -> Dict[str, ResolvedRecipe]:
    recipes: Dict[str, ResolvedRecipe] = {}
    for recipe in pruned.recipes:
        _put(recipes, recipe.id, microwave_recipe(recipe, default_subtype))
    for key, special in pruned.special_recipes.items():
        _put(recipes, key, special)
    for reaction in pruned.reactions:
        _put(recipes, reaction_key(reaction.id), reaction_recipe(reaction))
    return recipes


def resolve_reagents(
    reagents: Mapping[str, ReagentPrototype],
    locale: LocaleCatalog,
) -> Dict[str, ResolvedReagent]:
    """Display names come from the locale, falling back to the reagent ID."""
    out: Dict[str, ResolvedReagent] = {}
    for rid, reagent in reagents.items():
        name = locale.get(reagent.name) or rid
        out[rid] = ResolvedReagent(name=name, color=reagent.color or DEFAULT_REAGENT_COLOR)
    return out
