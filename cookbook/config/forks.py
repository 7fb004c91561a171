# -*- coding: utf-8 -*-
"""Fork list models.

The fork list is a YAML mapping of fork ID to fork settings. Keys are
camelCase in the file and snake_case in Python.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from cookbook.constants import RECIPE_METHODS
from cookbook.errors import ForkConfigError
from cookbook.indexers.closure import FilterOptions

__all__ = [
    "ConstructRecipeDef",
    "ConstructStepDef",
    "ForkInfo",
    "MicrowaveRecipeType",
    "SpecialDiet",
    "SpecialReagent",
    "load_fork_list",
    "parse_fork_list",
]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class _SpecialCommon(_Model):
    # CSS colour of the marker
    color: str
    hint: str
    filter_name: str = Field(alias="filterName")
    filter_summary: str = Field(alias="filterSummary")


class SpecialDiet(_SpecialCommon):
    """Foods a special stomach can digest.

    `organ` names an entity whose Stomach whitelist filters by at least one
    tag or component.
    """

    organ: str
    exclude_foods_with: List[str] = Field(default_factory=list, alias="excludeFoodsWith")


class SpecialReagent(_SpecialCommon):
    id: str


class MicrowaveRecipeType(_Model):
    default: bool = False
    machine: str
    verb: str
    filter_summary: str = Field(alias="filterSummary")


StepType = Literal["start", "end", "add", "mix", "heat", "heatMixture", "cut", "roll", "stir", "shake"]


class ConstructStepDef(_Model):
    type: StepType
    entity: Optional[Union[str, List[str]]] = None
    reagents: Optional[Dict[str, float]] = None
    min_count: Optional[int] = Field(default=None, alias="minCount")
    max_count: Optional[int] = Field(default=None, alias="maxCount")
    min_temp: Optional[float] = Field(default=None, alias="minTemp")
    max_temp: Optional[float] = Field(default=None, alias="maxTemp")

    @model_validator(mode="after")
    def _check_fields(self) -> "ConstructStepDef":
        if self.type in ("start", "end", "add") and not self.entity:
            raise ValueError(f"step '{self.type}' needs an entity")
        if self.type in ("start", "end") and not isinstance(self.entity, str):
            raise ValueError(f"step '{self.type}' takes a single entity")
        if self.type == "mix" and not self.reagents:
            raise ValueError("step 'mix' needs reagents")
        if self.type in ("heat", "heatMixture") and self.min_temp is None:
            raise ValueError(f"step '{self.type}' needs minTemp")
        return self


class ConstructRecipeDef(_Model):
    group: Optional[str] = None
    solid_result: Optional[str] = Field(default=None, alias="solidResult")
    reagent_result: Optional[str] = Field(default=None, alias="reagentResult")
    result_qty: Optional[float] = Field(default=None, alias="resultQty")
    steps: List[ConstructStepDef] = Field(default_factory=list)


class ForkInfo(_Model):
    name: str
    description: str
    hidden: bool = False
    path: str
    repo: str
    default: bool = False
    special_diets: List[SpecialDiet] = Field(default_factory=list, alias="specialDiets")
    special_reagents: List[SpecialReagent] = Field(default_factory=list, alias="specialReagents")
    # method -> entity drawn for it; None when the fork lacks the method
    method_entities: Dict[str, Optional[str]] = Field(alias="methodEntities")
    mix_fill_state: str = Field(alias="mixFillState")
    microwave_recipe_types: Optional[Dict[str, MicrowaveRecipeType]] = Field(
        default=None, alias="microwaveRecipeTypes"
    )
    sorting_id_rewrites: List[str] = Field(default_factory=list, alias="sortingIdRewrites")
    ignored_recipes: List[str] = Field(default_factory=list, alias="ignoredRecipes")
    ignored_special_recipes: List[str] = Field(default_factory=list, alias="ignoredSpecialRecipes")
    ignore_sources_of: List[str] = Field(default_factory=list, alias="ignoreSourcesOf")
    force_include_reagent_sources: Dict[str, List[str]] = Field(
        default_factory=dict, alias="forceIncludeReagentSources"
    )
    construct_recipes: Dict[str, ConstructRecipeDef] = Field(default_factory=dict, alias="constructRecipes")

    @model_validator(mode="after")
    def _check_methods(self) -> "ForkInfo":
        unknown = sorted(set(self.method_entities) - set(RECIPE_METHODS))
        if unknown:
            raise ValueError(f"unknown recipe methods in methodEntities: {', '.join(unknown)}")
        for method in RECIPE_METHODS:
            self.method_entities.setdefault(method, None)
        return self

    def resolve_path(self, base: Path) -> Path:
        p = Path(self.path).expanduser()
        return p if p.is_absolute() else (Path(base) / p)

    def default_microwave_recipe_type(self) -> Optional[str]:
        for subtype, data in (self.microwave_recipe_types or {}).items():
            if data.default:
                return subtype
        return None

    def filter_options(self) -> FilterOptions:
        return FilterOptions(
            ignored_recipes=frozenset(self.ignored_recipes),
            ignored_special_recipes=frozenset(self.ignored_special_recipes),
            ignore_sources_of=frozenset(self.ignore_sources_of),
            force_include_reagent_sources={
                rid: tuple(ids) for rid, ids in self.force_include_reagent_sources.items()
            },
            extra_entities=tuple(d.organ for d in self.special_diets),
        )


def parse_fork_list(data: Any) -> Dict[str, ForkInfo]:
    if not isinstance(data, dict):
        raise ForkConfigError("Fork list must be a mapping of fork ID to settings")

    forks: Dict[str, ForkInfo] = {}
    for fork_id, raw in data.items():
        try:
            forks[str(fork_id)] = ForkInfo.model_validate(raw)
        except ValidationError as e:
            raise ForkConfigError(f"Invalid settings for fork '{fork_id}':\n{e}") from e
    return forks


def load_fork_list(path: Path) -> Dict[str, ForkInfo]:
    p = Path(path)
    if not p.exists():
        raise ForkConfigError(f"Fork list not found: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8-sig"))
    except yaml.YAMLError as e:
        raise ForkConfigError(f"Fork list is not valid YAML: {p}: {e}") from e
    return parse_fork_list(data)
