# -*- coding: utf-8 -*-
"""Reaction result helpers."""

from __future__ import annotations

from typing import Mapping, Optional, Tuple

from cookbook.constants import NON_FOOD_REAGENT_GROUPS, SOLID_RESULT_EFFECTS
from cookbook.schemas.prototypes import ReactionPrototype, ReagentPrototype

__all__ = [
    "get_reagent_result",
    "get_solid_result",
    "is_food_related_reagent",
    "is_mixable",
]


def get_reagent_result(reaction: ReactionPrototype) -> Optional[Tuple[str, float]]:
    """The single reagent product and its amount, or None for zero or several."""
    if not reaction.products or len(reaction.products) != 1:
        return None
    (reagent_id, amount), = reaction.products.items()
    return reagent_id, amount


def get_solid_result(reaction: ReactionPrototype) -> Optional[str]:
    """The single entity spawned by the reaction's effects, if exactly one."""
    result: Optional[str] = None
    for effect in reaction.effects:
        if not isinstance(effect, Mapping):
            continue
        if effect.get("!type") not in SOLID_RESULT_EFFECTS:
            continue
        entity = effect.get("entity")
        if not isinstance(entity, str):
            continue
        if result is not None:
            return None
        result = entity
    return result


def is_mixable(reaction: ReactionPrototype) -> bool:
    """True when the reaction has no mixer prerequisite (centrifuge, electrolysis...)."""
    return not reaction.required_mixer_categories


def is_food_related_reagent(reagent: Optional[ReagentPrototype]) -> bool:
    if reagent is None:
        return True
    return reagent.group not in NON_FOOD_REAGENT_GROUPS
