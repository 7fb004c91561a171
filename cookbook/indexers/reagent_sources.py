# -*- coding: utf-8 -*-
"""Reagent source indexing.

A reagent source is grown produce that yields the reagent when ground or
juiced. Only reagents that are already part of the build are indexed, and
the index is built once after the closure has converged.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Sequence

from cookbook.indexers.shared import UsedSet, dedup_preserve
from cookbook.schemas.prototypes import Solution
from cookbook.schemas.resolved import ResolvedEntity

__all__ = ["find_source_reagents", "index_reagent_sources"]

logger = logging.getLogger(__name__)


def _extract_solutions(entity: ResolvedEntity) -> List[Solution]:
    if not entity.is_produce or entity.extractable is None or entity.solutions is None:
        return []

    found: List[Solution] = []
    name = entity.extractable.grind_solution_name
    if name is not None:
        grind = entity.solutions.get(name)
        if grind is not None and grind.reagents is not None:
            found.append(grind)
    juice = entity.extractable.juice_solution
    if juice is not None and juice.reagents is not None:
        found.append(juice)
    return found


def find_source_reagents(entity: ResolvedEntity, used_reagents: AbstractSet[str]) -> List[str]:
    """Used reagents this entity yields when ground or juiced, without duplicates."""
    out: List[str] = []
    for solution in _extract_solutions(entity):
        out.extend(rid for rid in solution.reagent_ids() if rid in used_reagents)
    return dedup_preserve(out)


def index_reagent_sources(
    entities: Iterable[ResolvedEntity],
    used_reagents: AbstractSet[str],
    used_entities: UsedSet,
    *,
    ignore_sources_of: AbstractSet[str] = frozenset(),
    force_include: Optional[Mapping[str, Sequence[str]]] = None,
) -> Dict[str, List[str]]:
    """Map reagent ID -> source entity IDs.

    Entities recorded as a source are added to `used_entities`. Forced
    sources are only added when the entity is already in `used_entities`.
    """
    sources: Dict[str, List[str]] = {}

    for entity in entities:
        recorded = False
        for reagent_id in find_source_reagents(entity, used_reagents):
            if reagent_id in ignore_sources_of:
                continue
            sources.setdefault(reagent_id, []).append(entity.id)
            recorded = True
        if recorded:
            used_entities.add(entity.id)

    for reagent_id, forced in (force_include or {}).items():
        if reagent_id not in used_reagents:
            continue
        current = sources.setdefault(reagent_id, [])
        for entity_id in forced:
            if entity_id not in used_entities:
                logger.debug("Forced source %s of %s is not in the build, skipping", entity_id, reagent_id)
                continue
            if entity_id not in current:
                current.append(entity_id)

    return sources
