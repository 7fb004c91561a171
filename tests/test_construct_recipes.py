# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from cookbook.config.forks import ConstructRecipeDef
from cookbook.construct_recipes import ConstructRecipeBuilder, build_declared_construct_recipe, main_verb
from cookbook.errors import RecipeShapeError


def test_builder_collects_ingredients_and_steps():
    recipe = (
        ConstructRecipeBuilder(group="Breakfast")
        .start_with("FoodPlate")
        .add(["FoodEgg", "FoodBacon"], min_count=1, max_count=2)
        .mix({"Ketchup": 5})
        .heat(373)
        .with_solid_result("FoodBreakfast")
        .to_recipe()
    )

    assert recipe.solids == {"FoodPlate": 1, "FoodEgg": 1, "FoodBacon": 1}
    assert set(recipe.reagents) == {"Ketchup"}
    assert recipe.reagents["Ketchup"].to_dict() == {}
    # mix and heat disagree
    assert recipe.main_verb is None

    out = recipe.to_dict("construct!Breakfast")
    assert out["method"] == "construct"
    assert out["group"] == "Breakfast"
    assert out["steps"][1] == {"type": "add", "entity": ["FoodEgg", "FoodBacon"], "minCount": 1, "maxCount": 2}
    assert out["steps"][3] == {"type": "heat", "minTemp": 373}


@pytest.mark.parametrize(
    "types, expected",
    [
        (["start", "add", "end"], None),
        (["mix", "stir", "shake"], "mix"),
        (["heat", "heatMixture"], "heat"),
        (["start", "cut"], "cut"),
        (["roll", "heat"], None),
    ],
)
def test_main_verb(types, expected):
    assert main_verb([{"type": t} for t in types]) == expected


def test_result_kinds_are_exclusive():
    with pytest.raises(RecipeShapeError, match="neither solid nor reagent"):
        ConstructRecipeBuilder().start_with("FoodPlate").to_recipe()

    with pytest.raises(RecipeShapeError, match="both solid and reagent"):
        ConstructRecipeBuilder().with_solid_result("FoodA").with_reagent_result("Juice")

    with pytest.raises(RecipeShapeError, match="both solid and reagent"):
        ConstructRecipeBuilder().with_reagent_result("Juice").with_solid_result("FoodA")


def test_declared_recipe_from_fork_config():
    definition = ConstructRecipeDef.model_validate(
        {
            "group": "Drinks",
            "reagentResult": "Smoothie",
            "resultQty": 30,
            "steps": [
                {"type": "start", "entity": "DrinkGlass"},
                {"type": "mix", "reagents": {"JuiceBanana": 10, "Milk": 20}},
                {"type": "shake"},
            ],
        }
    )

    recipe = build_declared_construct_recipe(definition)

    assert recipe.reagent_result == "Smoothie"
    assert recipe.result_qty == 30
    assert recipe.solids == {"DrinkGlass": 1}
    assert list(recipe.reagents) == ["JuiceBanana", "Milk"]
    assert recipe.main_verb == "mix"
    assert recipe.group == "Drinks"


def test_declared_recipe_without_group_uses_default():
    definition = ConstructRecipeDef.model_validate(
        {"solidResult": "FoodToast", "steps": [{"type": "start", "entity": "FoodBread"}, {"type": "heat", "minTemp": 400}]}
    )

    assert build_declared_construct_recipe(definition).group == "Other"
