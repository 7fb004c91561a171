# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
import subprocess
import textwrap

import pytest

from cookbook.config.forks import ForkInfo
from cookbook.engine import CookbookEngine, git_commit_hash, read_sorting_id_rewrites
from cookbook.errors import UnresolvedPrototypeError

PROTOTYPES = textwrap.dedent(
    """\
    - type: entity
      id: KitchenMicrowave
      name: microwave
      components:
      - type: Sprite
        sprite: Structures/Machines/microwave.rsi
        state: mw

    - type: entity
      id: Beaker
      name: beaker
      components:
      - type: Sprite
        sprite: Objects/Specific/Chemistry/beaker.rsi
        layers:
        - state: beaker

    - type: entity
      id: FoodDough
      name: dough
      components:
      - type: Sprite
        sprite: Objects/Consumable/Food/ingredients.rsi
        state: dough

    - type: entity
      id: FoodBread
      name: bread
      components:
      - type: Sprite
        sprite: Objects/Consumable/Food/Baked/bread.rsi
        state: plain
      - type: SolutionContainerManager
        solutions:
          food:
            reagents:
            - ReagentId: Nutriment
              Quantity: 10

    - type: entity
      id: FoodUnused
      name: unused

    - type: reagent
      id: Milk
      name: reagent-name-milk
      color: "#DFDFDF"

    - type: reagent
      id: Nutriment
      name: reagent-name-nutriment

    - type: reagent
      id: Sugar
      name: reagent-name-sugar

    - type: microwaveMealRecipe
      id: RecipeBread
      name: bread recipe
      result: FoodBread
      time: 15
      solids:
        FoodDough: 1
      reagents:
        Milk: 5
        Sugar: 1
    """
)

FORK = {
    "name": "Test",
    "description": "A small fork",
    "path": "game",
    "repo": "https://example.invalid/game",
    "default": True,
    "methodEntities": {"microwave": "KitchenMicrowave", "mix": "Beaker"},
    "mixFillState": "beaker1",
    "specialReagents": [
        {"id": "Nutriment", "color": "#0f0", "hint": "h", "filterName": "n", "filterSummary": "s"}
    ],
    "sortingIdRewrites": ["rewrites.yml"],
}


@pytest.fixture
def checkout(tmp_path):
    game = tmp_path / "game"
    proto_dir = game / "Resources" / "Prototypes" / "Food"
    proto_dir.mkdir(parents=True)
    (proto_dir / "food.yml").write_text(PROTOTYPES, encoding="utf-8")
    locale_dir = game / "Resources" / "Locale" / "en-US" / "reagents"
    locale_dir.mkdir(parents=True)
    (locale_dir / "food.ftl").write_text("reagent-name-milk = milk\n", encoding="utf-8")
    (tmp_path / "rewrites.yml").write_text("FoodBread: Bread\nFoodNope: Nope\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def no_git(monkeypatch):
    monkeypatch.setattr("cookbook.engine.git_commit_hash", lambda repo_dir: "0123456789abcdef")


def test_build_fork(checkout, no_git, caplog):
    engine = CookbookEngine("test", ForkInfo.model_validate(FORK), base_dir=checkout)

    with caplog.at_level(logging.WARNING):
        d = engine.build()

    assert d.commit_hash == "0123456789abcdef"
    assert list(d.recipes) == ["RecipeBread"]
    assert set(d.entities) == {"FoodBread", "FoodDough"}
    assert d.reagents["Milk"].name == "milk"
    # No locale entry: falls back to the ID.
    assert d.reagents["Sugar"].name == "Sugar"
    assert "Nutriment" not in d.reagents
    assert d.reagent_sources == {}
    assert [s.reagent for s in d.specials] == ["Nutriment"]
    assert set(d.sprites.methods) == {"microwave", "mix"}
    assert d.sorting_id_rewrites == {"FoodBread": "Bread", "FoodNope": "Nope"}
    assert "Unknown entity prototype ID in rewrite file: FoodNope" in caplog.text


def test_missing_method_entity_aborts(checkout, no_git):
    fork = ForkInfo.model_validate({**FORK, "methodEntities": {"microwave": "KitchenOven"}})

    with pytest.raises(UnresolvedPrototypeError, match="entity: KitchenOven"):
        CookbookEngine("test", fork, base_dir=checkout).build()


def test_rewrite_paths_are_relative_to_base_dir(checkout):
    engine = CookbookEngine("test", ForkInfo.model_validate(FORK), base_dir=checkout)

    assert engine.root == checkout / "game"
    assert engine.rewrite_paths() == [checkout / "rewrites.yml"]


def test_rewrite_files_merge_in_order(tmp_path, caplog):
    a = tmp_path / "a.yml"
    b = tmp_path / "b.yml"
    c = tmp_path / "c.yml"
    a.write_text("FoodA: x\nFoodB: y\n", encoding="utf-8")
    b.write_text("FoodB: z\n", encoding="utf-8")
    c.write_text("- not a mapping\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="cookbook.engine"):
        out = read_sorting_id_rewrites([a, b, c], {"FoodA": None, "FoodB": None})

    assert out == {"FoodA": "x", "FoodB": "z"}
    assert "not a mapping" in caplog.text


def test_git_commit_hash_unknown(tmp_path, monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise subprocess.CalledProcessError(128, args[0])

    monkeypatch.setattr(subprocess, "run", fail)

    with caplog.at_level(logging.WARNING, logger="cookbook.engine"):
        assert git_commit_hash(tmp_path) == "unknown"
    assert "Could not read git commit" in caplog.text


def test_build_cli(checkout, no_git, tmp_path):
    from devtools.build_cookbook import main

    forks_yml = checkout / "forks.yml"
    forks_yml.write_text(json.dumps({"test": FORK}), encoding="utf-8")
    out_dir = tmp_path / "public"
    cache = tmp_path / "cache.json"
    args = ["--forks", str(forks_yml), "--out", str(out_dir), "--cache", str(cache)]

    assert main(args) == 0

    index = json.loads((out_dir / "data" / "index.json").read_text(encoding="utf-8"))
    assert [f["id"] for f in index] == ["test"]
    assert (out_dir / "data" / f"data_test.{index[0]['hash']}.json").exists()
    assert json.loads(cache.read_text(encoding="utf-8"))["cookbook"]["index"] == index

    # Unchanged inputs: skipped, outputs left alone.
    assert main(args) == 0
    assert main(args + ["--only", "other"]) == 2
