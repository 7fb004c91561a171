# -*- coding: utf-8 -*-
"""Shared in-memory game data for the test-suite.

`game` builds a `RawGameData` from the same plain dicts the YAML reader
produces, so the schemas' `from_dict()` constructors run in every test.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cookbook.inheritance import resolve_entities  # noqa: E402
from cookbook.schemas.prototypes import (  # noqa: E402
    ConstructionGraphPrototype,
    EntityPrototype,
    MicrowaveMealRecipe,
    RawGameData,
    ReactionPrototype,
    ReagentPrototype,
    StackPrototype,
)


def _solution(reagents: Sequence[str], qty: float = 5) -> Dict[str, Any]:
    return {"reagents": [{"ReagentId": r, "Quantity": qty} for r in reagents]}


class GameDataBuilder:
    def __init__(self) -> None:
        self.raw = RawGameData()

    def entity(
        self,
        eid: str,
        *,
        parent: Any = None,
        name: Optional[str] = None,
        abstract: bool = False,
        sprite: Optional[Dict[str, Any]] = None,
        food: Optional[Sequence[str]] = None,
        solutions: Optional[Dict[str, Sequence[str]]] = None,
        slice: Optional[str] = None,
        slice_count: Optional[int] = None,
        construction: Optional[Tuple[str, str]] = None,
        produce: bool = False,
        grind: Optional[str] = None,
        juice: Optional[Sequence[str]] = None,
        tags: Optional[Sequence[str]] = None,
        stomach: Optional[Dict[str, Any]] = None,
        deep_fry: Optional[str] = None,
        components: Sequence[Dict[str, Any]] = (),
    ) -> "GameDataBuilder":
        comps: List[Dict[str, Any]] = []
        if sprite is not None:
            comps.append({"type": "Sprite", **sprite})
        sols: Dict[str, Any] = {}
        if food is not None:
            sols["food"] = _solution(food)
        for sol_name, reagents in (solutions or {}).items():
            sols[sol_name] = _solution(reagents)
        if sols:
            comps.append({"type": "SolutionContainerManager", "solutions": sols})
        if slice is not None:
            sliceable: Dict[str, Any] = {"type": "SliceableFood", "slice": slice}
            if slice_count is not None:
                sliceable["count"] = slice_count
            comps.append(sliceable)
        if construction is not None:
            comps.append({"type": "Construction", "graph": construction[0], "node": construction[1]})
        if produce:
            comps.append({"type": "Produce"})
        if grind is not None or juice is not None:
            extractable: Dict[str, Any] = {"type": "Extractable"}
            if grind is not None:
                extractable["grindableSolutionName"] = grind
            if juice is not None:
                extractable["juiceSolution"] = _solution(juice)
            comps.append(extractable)
        if tags is not None:
            comps.append({"type": "Tag", "tags": list(tags)})
        if stomach is not None:
            comps.append({"type": "Stomach", "specialDigestible": stomach})
        if deep_fry is not None:
            comps.append({"type": "DeepFrySpawn", "output": deep_fry})
        comps.extend(components)

        raw: Dict[str, Any] = {"type": "entity", "id": eid, "components": comps}
        if parent is not None:
            raw["parent"] = parent
        if name is not None:
            raw["name"] = name
        if abstract:
            raw["abstract"] = True
        self.raw.entities[eid] = EntityPrototype.from_dict(raw)
        return self

    def entities(self, *ids: str) -> "GameDataBuilder":
        for eid in ids:
            self.entity(eid, name=eid.lower())
        return self

    def reagent(self, rid: str, *, group: Optional[str] = None, **extra: Any) -> "GameDataBuilder":
        raw = {"type": "reagent", "id": rid, **extra}
        if group is not None:
            raw["group"] = group
        self.raw.reagents[rid] = ReagentPrototype.from_dict(raw)
        return self

    def reagents(self, *ids: str) -> "GameDataBuilder":
        for rid in ids:
            self.reagent(rid)
        return self

    def stack(self, sid: str, spawn: str) -> "GameDataBuilder":
        self.raw.stacks[sid] = StackPrototype.from_dict({"type": "stack", "id": sid, "spawn": spawn})
        return self

    def recipe(
        self,
        rid: str,
        result: str,
        solids: Optional[Dict[str, float]] = None,
        reagents: Optional[Dict[str, float]] = None,
        **extra: Any,
    ) -> "GameDataBuilder":
        raw = {
            "type": "microwaveMealRecipe",
            "id": rid,
            "result": result,
            "solids": solids or {},
            "reagents": reagents or {},
            **extra,
        }
        self.raw.recipes.append(MicrowaveMealRecipe.from_dict(raw))
        return self

    def reaction(
        self,
        rid: str,
        reactants: Dict[str, Any],
        products: Optional[Dict[str, float]] = None,
        **extra: Any,
    ) -> "GameDataBuilder":
        raw: Dict[str, Any] = {"type": "reaction", "id": rid, "reactants": reactants, **extra}
        if products is not None:
            raw["products"] = products
        self.raw.reactions.append(ReactionPrototype.from_dict(raw))
        return self

    def graph(self, gid: str, nodes: List[Dict[str, Any]]) -> "GameDataBuilder":
        self.raw.construction_graphs[gid] = ConstructionGraphPrototype.from_dict(
            {"type": "constructionGraph", "id": gid, "graph": nodes}
        )
        return self

    def roll_graph(self, gid: str, target: str) -> "GameDataBuilder":
        """start --(Rolling)--> end spawning `target`."""
        return self.graph(
            gid,
            [
                {"node": "start", "edges": [{"to": "end", "steps": [{"tool": "Rolling"}]}]},
                {"node": "end", "entity": target},
            ],
        )

    def heat_graph(self, gid: str, target: str, min_temp: float = 450) -> "GameDataBuilder":
        """start --(>= min_temp)--> end spawning `target`."""
        return self.graph(
            gid,
            [
                {"node": "start", "edges": [{"to": "end", "steps": [{"minTemperature": min_temp}]}]},
                {"node": "end", "entity": target},
            ],
        )

    def build(self) -> RawGameData:
        return self.raw

    def resolved(self):
        return resolve_entities(self.raw.entities)


@pytest.fixture
def game() -> GameDataBuilder:
    return GameDataBuilder()


@pytest.fixture
def cake_game(game: GameDataBuilder) -> GameDataBuilder:
    """R1 microwaves CakeMix into Cake; Cake slices into CakeSlice."""
    game.recipe("R1", "Cake", solids={"CakeMix": 1})
    game.entity("CakeMix", name="cake mix")
    game.entity("Cake", name="cake", slice="CakeSlice", slice_count=8)
    game.entity("CakeSlice", name="slice of cake")
    return game
