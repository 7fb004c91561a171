# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

import pytest

from cookbook.indexers.closure import PrunedGameData
from cookbook.indexers.recipes import (
    microwave_recipe,
    normalize_recipes,
    reaction_key,
    reaction_recipe,
    resolve_reagents,
    resolve_recipe_subtype,
)
from cookbook.parsers.locale import LocaleCatalog
from cookbook.schemas.prototypes import MicrowaveMealRecipe, ReactionPrototype, ReagentPrototype
from cookbook.schemas.resolved import CutRecipe


def _meal(**raw):
    return MicrowaveMealRecipe.from_dict({"id": "RecipeBread", "result": "FoodBread", **raw})


def test_microwave_defaults():
    recipe = microwave_recipe(_meal(solids={"FoodDough": 1}, reagents={"Water": 5}))

    assert recipe.time == 5
    assert recipe.group == "Other"
    assert recipe.subtype is None
    assert recipe.to_dict("RecipeBread") == {
        "id": "RecipeBread",
        "method": "microwave",
        "solidResult": "FoodBread",
        "reagentResult": None,
        "solids": {"FoodDough": 1},
        "reagents": {"Water": {"amount": 5}},
        "group": "Other",
        "time": 5,
    }


def test_microwave_fields_carried():
    recipe = microwave_recipe(_meal(time=10, group="Breads", resultCount=3))
    out = recipe.to_dict()

    assert out["time"] == 10
    assert out["group"] == "Breads"
    assert out["resultQty"] == 3
    assert "id" not in out


@pytest.mark.parametrize(
    "recipe_type, expected",
    [
        (None, "microwave"),
        ([], "microwave"),
        ("assembler", "assembler"),
        (["assembler"], "assembler"),
        (["assembler", "oven"], ("assembler", "oven")),
    ],
)
def test_recipe_subtype(recipe_type, expected):
    raw = {} if recipe_type is None else {"recipeType": recipe_type}

    assert resolve_recipe_subtype(_meal(**raw), "microwave") == expected


def test_multiple_subtypes_written_as_list():
    recipe = microwave_recipe(_meal(recipeType=["assembler", "oven"]))

    assert recipe.to_dict()["subtype"] == ["assembler", "oven"]


def _reaction(**raw):
    base = {
        "id": "MakeDough",
        "reactants": {"Flour": {"amount": 15}, "Water": {"amount": 10, "catalyst": True}},
        "products": {"Dough": 15},
    }
    base.update(raw)
    return ReactionPrototype.from_dict(base)


def test_reaction_recipe_shape():
    out = reaction_recipe(_reaction(minTemp=300, maxTemp=400)).to_dict(reaction_key("MakeDough"))

    assert out == {
        "id": "r!MakeDough",
        "method": "mix",
        "solidResult": None,
        "reagentResult": "Dough",
        "solids": {},
        "reagents": {"Flour": {"amount": 15}, "Water": {"amount": 10, "catalyst": True}},
        "group": "Other",
        "resultAmount": 15,
        "minTemp": 300,
        "maxTemp": 400,
    }


@pytest.mark.parametrize("max_temp", [float("inf"), 0, None])
def test_reaction_unbounded_max_temp(max_temp):
    raw = {} if max_temp is None else {"maxTemp": max_temp}
    recipe = reaction_recipe(_reaction(**raw))

    assert recipe.max_temp is None
    assert recipe.min_temp == 0


def test_solid_reaction_recipe():
    recipe = reaction_recipe(
        _reaction(
            products=None,
            effects=[{"!type": "CreateEntityReactionEffect", "entity": "FoodTofu"}],
        )
    )

    assert recipe.solid_result == "FoodTofu"
    assert recipe.reagent_result is None
    assert recipe.result_amount == 0


def test_normalize_order_and_first_key_wins(caplog):
    pruned = PrunedGameData(
        entities={},
        reagents={},
        recipes=[_meal(), MicrowaveMealRecipe.from_dict({"id": "cut!Cake", "result": "FoodOther"})],
        reactions=[_reaction()],
        special_recipes={
            "cut!Cake": CutRecipe(solid_result="CakeSlice", solids={"Cake": 1}, max_count=8),
            "cut!Pie": CutRecipe(solid_result="PieSlice", solids={"Pie": 1}),
        },
        reagent_sources={},
    )

    with caplog.at_level(logging.WARNING, logger="cookbook.indexers.recipes"):
        recipes = normalize_recipes(pruned, "microwave")

    assert list(recipes) == ["RecipeBread", "cut!Cake", "cut!Pie", "r!MakeDough"]
    assert recipes["cut!Cake"].method == "microwave"
    assert recipes["RecipeBread"].subtype == "microwave"
    assert "Duplicate recipe ID cut!Cake" in caplog.text


def test_resolve_reagents_names_and_colors():
    reagents = {
        "Milk": ReagentPrototype.from_dict({"id": "Milk", "name": "reagent-name-milk", "color": "#eeeeee"}),
        "Goop": ReagentPrototype.from_dict({"id": "Goop", "name": "reagent-name-goop"}),
    }
    locale = LocaleCatalog({"reagent-name-milk": "milk"})

    out = resolve_reagents(reagents, locale)

    assert out["Milk"].name == "milk"
    assert out["Milk"].color == "#eeeeee"
    assert out["Goop"].name == "Goop"
    assert out["Goop"].color == "#ffffff"
