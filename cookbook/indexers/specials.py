# -*- coding: utf-8 -*-
"""Special traits: diets and highlighted reagents.

Every configured special diet and special reagent becomes one bit of an
entity's `traits` mask, diets first, in configuration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Sequence

from cookbook.config.forks import SpecialDiet, SpecialReagent
from cookbook.errors import ForkConfigError
from cookbook.schemas.resolved import ResolvedEntity

__all__ = ["ResolvedSpecial", "resolve_specials", "traits_mask"]


@dataclass(frozen=True)
class ResolvedSpecial:
    mask: int
    hint: str
    color: str
    filter_name: str
    filter_summary: str
    # Diet matching; empty for special reagents.
    tags: FrozenSet[str] = frozenset()
    components: FrozenSet[str] = frozenset()
    exclude_reagents: FrozenSet[str] = frozenset()
    # Reagent matching; empty for diets.
    reagent: str = ""
    is_diet: bool = False

    def matches(self, entity: ResolvedEntity) -> bool:
        if self.is_diet:
            if not (entity.tags & self.tags or entity.components & self.components):
                return False
            return not (entity.reagents & self.exclude_reagents)
        return self.reagent in entity.reagents

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mask": self.mask,
            "hint": self.hint,
            "color": self.color,
            "filterName": self.filter_name,
            "filterSummary": self.filter_summary,
        }


def _resolve_diet(diet: SpecialDiet, mask: int, entities: Mapping[str, ResolvedEntity]) -> ResolvedSpecial:
    organ = entities.get(diet.organ)
    if organ is None or organ.stomach is None:
        raise ForkConfigError(f"Special diet organ '{diet.organ}' is not an entity with a Stomach")
    tags = frozenset(organ.stomach.tags or ())
    components = frozenset(organ.stomach.components or ())
    if not tags and not components:
        raise ForkConfigError(f"Special diet organ '{diet.organ}' has no tag or component whitelist")
    return ResolvedSpecial(
        mask=mask,
        hint=diet.hint,
        color=diet.color,
        filter_name=diet.filter_name,
        filter_summary=diet.filter_summary,
        tags=tags,
        components=components,
        exclude_reagents=frozenset(diet.exclude_foods_with),
        is_diet=True,
    )


def resolve_specials(
    entities: Mapping[str, ResolvedEntity],
    diets: Sequence[SpecialDiet] = (),
    reagents: Sequence[SpecialReagent] = (),
) -> List[ResolvedSpecial]:
    out: List[ResolvedSpecial] = []
    for diet in diets:
        out.append(_resolve_diet(diet, 1 << len(out), entities))
    for special in reagents:
        out.append(
            ResolvedSpecial(
                mask=1 << len(out),
                hint=special.hint,
                color=special.color,
                filter_name=special.filter_name,
                filter_summary=special.filter_summary,
                reagent=special.id,
            )
        )
    return out


def traits_mask(entity: ResolvedEntity, specials: Iterable[ResolvedSpecial]) -> int:
    mask = 0
    for special in specials:
        if special.matches(entity):
            mask |= special.mask
    return mask
