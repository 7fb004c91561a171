# -*- coding: utf-8 -*-
"""Raw prototype records.

These mirror the YAML prototypes closely. Only the components the cookbook
cares about get their own record type; every other component is kept as an
`OtherComponent` so that component presence can still be tested.

`from_dict()` constructors accept the plain dicts produced by the YAML
reader and never raise on missing optional fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


# =========================================================
# Value helpers
# =========================================================

def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


def _opt_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _opt_num(v: Any) -> Optional[float]:
    """Numbers keep their YAML type so that `1` is written back as `1`."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return v
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _opt_str_tuple(v: Any) -> Optional[Tuple[str, ...]]:
    if v is None:
        return None
    if isinstance(v, str):
        return (v,)
    if isinstance(v, (list, tuple)):
        return tuple(str(x) for x in v if x is not None)
    return None


def _num_map(v: Any) -> Dict[str, float]:
    out: Dict[str, float] = {}
    if not isinstance(v, Mapping):
        return out
    for k, amount in v.items():
        num = _opt_num(amount)
        out[str(k)] = num if num is not None else 0.0
    return out


# =========================================================
# Components
# =========================================================

@dataclass(frozen=True)
class SolutionReagent:
    reagent_id: str
    quantity: float

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SolutionReagent":
        return cls(
            reagent_id=str(raw.get("ReagentId") or ""),
            quantity=_opt_num(raw.get("Quantity")) or 0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"ReagentId": self.reagent_id, "Quantity": self.quantity}


@dataclass(frozen=True)
class Solution:
    max_vol: Optional[float] = None
    reagents: Optional[Tuple[SolutionReagent, ...]] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Solution":
        if not isinstance(raw, Mapping):
            return cls()
        reagents = raw.get("reagents")
        return cls(
            max_vol=_opt_num(raw.get("maxVol")),
            reagents=(
                tuple(SolutionReagent.from_dict(r) for r in reagents if isinstance(r, Mapping))
                if isinstance(reagents, list)
                else None
            ),
        )

    def reagent_ids(self) -> List[str]:
        return [r.reagent_id for r in (self.reagents or ()) if r.reagent_id]


@dataclass(frozen=True)
class SpriteLayerSpec:
    sprite: Optional[str] = None
    state: Optional[str] = None
    visible: Optional[bool] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "SpriteLayerSpec":
        if not isinstance(raw, Mapping):
            return cls()
        visible = raw.get("visible")
        return cls(
            sprite=_opt_str(raw.get("sprite")),
            state=_opt_str(raw.get("state")),
            visible=visible if isinstance(visible, bool) else None,
            color=_opt_str(raw.get("color")),
        )


@dataclass(frozen=True)
class SpriteComponent:
    sprite: Optional[str] = None
    state: Optional[str] = None
    color: Optional[str] = None
    layers: Optional[Tuple[SpriteLayerSpec, ...]] = None


@dataclass(frozen=True)
class SolutionContainerManagerComponent:
    solutions: Optional[Dict[str, Solution]] = None


@dataclass(frozen=True)
class SliceableFoodComponent:
    slice: Optional[str] = None
    count: Optional[int] = None


@dataclass(frozen=True)
class ExtractableComponent:
    grindable_solution_name: Optional[str] = None
    # Always inlined, never looked up in the solution container.
    juice_solution: Optional[Solution] = None


@dataclass(frozen=True)
class ProduceComponent:
    pass


@dataclass(frozen=True)
class ConstructionComponent:
    graph: Optional[str] = None
    node: Optional[str] = None
    edge: Optional[int] = None
    step: Optional[int] = None


@dataclass(frozen=True)
class TagComponent:
    tags: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class EntityWhitelist:
    tags: Optional[Tuple[str, ...]] = None
    components: Optional[Tuple[str, ...]] = None
    # Parsed only so that it can be reported; size filters are unsupported.
    sizes: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class StomachComponent:
    special_digestible: Optional[EntityWhitelist] = None


@dataclass(frozen=True)
class DeepFrySpawnComponent:
    output: Optional[str] = None


@dataclass(frozen=True)
class FoodSequenceStartPointComponent:
    key: Optional[str] = None
    max_layers: Optional[int] = None


@dataclass(frozen=True)
class FoodSequenceElementComponent:
    entries: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class OtherComponent:
    type: str


Component = Union[
    SpriteComponent,
    SolutionContainerManagerComponent,
    SliceableFoodComponent,
    ExtractableComponent,
    ProduceComponent,
    ConstructionComponent,
    TagComponent,
    StomachComponent,
    DeepFrySpawnComponent,
    FoodSequenceStartPointComponent,
    FoodSequenceElementComponent,
    OtherComponent,
]


def _parse_sprite(raw: Mapping[str, Any]) -> SpriteComponent:
    layers = raw.get("layers")
    return SpriteComponent(
        sprite=_opt_str(raw.get("sprite")),
        state=_opt_str(raw.get("state")),
        color=_opt_str(raw.get("color")),
        layers=tuple(SpriteLayerSpec.from_dict(x) for x in layers) if isinstance(layers, list) else None,
    )


def _parse_solution_container(raw: Mapping[str, Any]) -> SolutionContainerManagerComponent:
    sols = raw.get("solutions")
    if not isinstance(sols, Mapping):
        return SolutionContainerManagerComponent()
    return SolutionContainerManagerComponent(
        solutions={str(name): Solution.from_dict(sol) for name, sol in sols.items()}
    )


def _parse_whitelist(raw: Any) -> Optional[EntityWhitelist]:
    if not isinstance(raw, Mapping):
        return None
    return EntityWhitelist(
        tags=_opt_str_tuple(raw.get("tags")),
        components=_opt_str_tuple(raw.get("components")),
        sizes=_opt_str_tuple(raw.get("sizes")),
    )


def _parse_food_sequence_element(raw: Mapping[str, Any]) -> FoodSequenceElementComponent:
    entries = raw.get("entries")
    if not isinstance(entries, Mapping):
        return FoodSequenceElementComponent()
    return FoodSequenceElementComponent(entries={str(k): str(v) for k, v in entries.items()})


def parse_component(raw: Mapping[str, Any]) -> Component:
    """Turn one `components:` entry into its typed record."""
    ctype = str(raw.get("type") or "")
    if ctype == "Sprite":
        return _parse_sprite(raw)
    if ctype == "SolutionContainerManager":
        return _parse_solution_container(raw)
    if ctype == "SliceableFood":
        return SliceableFoodComponent(slice=_opt_str(raw.get("slice")), count=_opt_int(raw.get("count")))
    if ctype == "Extractable":
        juice = raw.get("juiceSolution")
        return ExtractableComponent(
            grindable_solution_name=_opt_str(raw.get("grindableSolutionName")),
            juice_solution=Solution.from_dict(juice) if juice is not None else None,
        )
    if ctype == "Produce":
        return ProduceComponent()
    if ctype == "Construction":
        return ConstructionComponent(
            graph=_opt_str(raw.get("graph")),
            node=_opt_str(raw.get("node")),
            edge=_opt_int(raw.get("edge")),
            step=_opt_int(raw.get("step")),
        )
    if ctype == "Tag":
        return TagComponent(tags=_opt_str_tuple(raw.get("tags")))
    if ctype == "Stomach":
        return StomachComponent(special_digestible=_parse_whitelist(raw.get("specialDigestible")))
    if ctype == "DeepFrySpawn":
        return DeepFrySpawnComponent(output=_opt_str(raw.get("output")))
    if ctype == "FoodSequenceStartPoint":
        return FoodSequenceStartPointComponent(key=_opt_str(raw.get("key")), max_layers=_opt_int(raw.get("maxLayers")))
    if ctype == "FoodSequenceElement":
        return _parse_food_sequence_element(raw)
    return OtherComponent(type=ctype)


def component_type(comp: Component) -> str:
    """The prototype-level component name (e.g. `Sprite`, `Tag`)."""
    if isinstance(comp, OtherComponent):
        return comp.type
    name = type(comp).__name__
    return name[: -len("Component")] if name.endswith("Component") else name


# =========================================================
# Prototypes
# =========================================================

@dataclass(frozen=True)
class EntityPrototype:
    id: str
    parents: Tuple[str, ...] = ()
    name: Optional[str] = None
    abstract: bool = False
    components: Tuple[Component, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EntityPrototype":
        comps = raw.get("components")
        return cls(
            id=str(raw["id"]),
            parents=_opt_str_tuple(raw.get("parent")) or (),
            name=_opt_str(raw.get("name")),
            abstract=bool(raw.get("abstract") or False),
            components=(
                tuple(parse_component(c) for c in comps if isinstance(c, Mapping))
                if isinstance(comps, list)
                else ()
            ),
        )


@dataclass(frozen=True)
class ReagentPrototype:
    id: str
    name: str
    color: Optional[str] = None
    group: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ReagentPrototype":
        return cls(
            id=str(raw["id"]),
            # A Fluent message key, not display text.
            name=str(raw.get("name") or raw["id"]),
            color=_opt_str(raw.get("color")),
            group=_opt_str(raw.get("group")),
        )


@dataclass(frozen=True)
class StackPrototype:
    id: str
    spawn: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "StackPrototype":
        return cls(id=str(raw["id"]), spawn=str(raw.get("spawn") or raw["id"]))


@dataclass(frozen=True)
class GraphStep:
    tool: Optional[str] = None
    min_temperature: Optional[float] = None
    max_temperature: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "GraphStep":
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            tool=_opt_str(raw.get("tool")),
            min_temperature=_opt_num(raw.get("minTemperature")),
            max_temperature=_opt_num(raw.get("maxTemperature")),
        )


@dataclass(frozen=True)
class GraphEdge:
    to: str
    steps: Tuple[GraphStep, ...] = ()
    conditions: Tuple[Any, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "GraphEdge":
        steps = raw.get("steps")
        conditions = raw.get("conditions")
        return cls(
            to=str(raw.get("to") or ""),
            steps=tuple(GraphStep.from_dict(s) for s in steps) if isinstance(steps, list) else (),
            conditions=tuple(conditions) if isinstance(conditions, list) else (),
        )


@dataclass(frozen=True)
class GraphNode:
    node: str
    entity: Optional[str] = None
    edges: Tuple[GraphEdge, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "GraphNode":
        edges = raw.get("edges")
        return cls(
            node=str(raw.get("node") or ""),
            entity=_opt_str(raw.get("entity")),
            edges=(
                tuple(GraphEdge.from_dict(e) for e in edges if isinstance(e, Mapping))
                if isinstance(edges, list)
                else ()
            ),
        )


@dataclass(frozen=True)
class ConstructionGraphPrototype:
    id: str
    nodes: Tuple[GraphNode, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ConstructionGraphPrototype":
        graph = raw.get("graph")
        return cls(
            id=str(raw["id"]),
            nodes=(
                tuple(GraphNode.from_dict(n) for n in graph if isinstance(n, Mapping))
                if isinstance(graph, list)
                else ()
            ),
        )

    def find_node(self, name: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.node == name:
                return node
        return None


@dataclass(frozen=True)
class MicrowaveMealRecipe:
    id: str
    result: str
    name: Optional[str] = None
    time: Optional[float] = None
    solids: Dict[str, float] = field(default_factory=dict)
    reagents: Dict[str, float] = field(default_factory=dict)
    group: Optional[str] = None
    # Frontier: machine subtype(s) and result count.
    recipe_type: Optional[Union[str, Tuple[str, ...]]] = None
    result_count: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "MicrowaveMealRecipe":
        rtype = raw.get("recipeType")
        if isinstance(rtype, list):
            recipe_type: Optional[Union[str, Tuple[str, ...]]] = tuple(str(x) for x in rtype)
        else:
            recipe_type = _opt_str(rtype)
        return cls(
            id=str(raw["id"]),
            result=str(raw.get("result") or ""),
            name=_opt_str(raw.get("name")),
            time=_opt_num(raw.get("time")),
            solids=_num_map(raw.get("solids")),
            reagents=_num_map(raw.get("reagents")),
            group=_opt_str(raw.get("group")),
            recipe_type=recipe_type,
            result_count=_opt_int(raw.get("resultCount")),
        )


@dataclass(frozen=True)
class Reactant:
    amount: float
    catalyst: Optional[bool] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Reactant":
        if not isinstance(raw, Mapping):
            return cls(amount=_opt_num(raw) or 0.0)
        catalyst = raw.get("catalyst")
        return cls(
            amount=_opt_num(raw.get("amount")) or 0.0,
            catalyst=catalyst if isinstance(catalyst, bool) else None,
        )


@dataclass(frozen=True)
class ReactionPrototype:
    id: str
    reactants: Dict[str, Reactant] = field(default_factory=dict)
    required_mixer_categories: Optional[Tuple[str, ...]] = None
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None
    products: Optional[Dict[str, float]] = None
    effects: Tuple[Any, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ReactionPrototype":
        reactants = raw.get("reactants")
        products = raw.get("products")
        effects = raw.get("effects")
        return cls(
            id=str(raw["id"]),
            reactants=(
                {str(k): Reactant.from_dict(v) for k, v in reactants.items()}
                if isinstance(reactants, Mapping)
                else {}
            ),
            required_mixer_categories=_opt_str_tuple(raw.get("requiredMixerCategories")),
            min_temp=_opt_num(raw.get("minTemp")),
            max_temp=_opt_num(raw.get("maxTemp")),
            products=_num_map(products) if isinstance(products, Mapping) else None,
            effects=tuple(effects) if isinstance(effects, list) else (),
        )


# =========================================================
# Dataset
# =========================================================

@dataclass
class RawGameData:
    """Every relevant prototype of one fork, keyed by ID where IDs are unique."""

    entities: Dict[str, EntityPrototype] = field(default_factory=dict)
    reagents: Dict[str, ReagentPrototype] = field(default_factory=dict)
    stacks: Dict[str, StackPrototype] = field(default_factory=dict)
    construction_graphs: Dict[str, ConstructionGraphPrototype] = field(default_factory=dict)
    recipes: List[MicrowaveMealRecipe] = field(default_factory=list)
    reactions: List[ReactionPrototype] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "entities": len(self.entities),
            "reagents": len(self.reagents),
            "stacks": len(self.stacks),
            "construction_graphs": len(self.construction_graphs),
            "recipes": len(self.recipes),
            "reactions": len(self.reactions),
        }
