# -*- coding: utf-8 -*-
"""Construction graph classification.

The game's construction graphs are general state machines. Only two simple
shapes are understood here, both starting at the entity's current node:

- an unconditional single-step edge using the `Rolling` tool -> `roll`;
- an unconditional single-step edge with a minimum and no maximum
  temperature -> `heat`.

The edge must lead to a node that spawns a different entity. Every matching
edge is reported, so one entity may be both rollable and heatable.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from cookbook.constants import ROLLING_TOOL
from cookbook.schemas.prototypes import ConstructionGraphPrototype
from cookbook.schemas.resolved import HeatRecipe, ResolvedConstruction, ResolvedRecipe, RollRecipe

__all__ = ["traverse_construction_graph"]

logger = logging.getLogger(__name__)


def traverse_construction_graph(
    entity_id: str,
    state: Optional[ResolvedConstruction],
    graphs: Mapping[str, ConstructionGraphPrototype],
) -> List[ResolvedRecipe]:
    """Return the roll/heat recipes for `entity_id`, in edge order."""
    if state is None or state.graph is None or state.node is None:
        return []
    # Entities in the middle of construction cannot be classified.
    if state.edge is not None or state.step is not None:
        return []

    graph = graphs.get(state.graph)
    if graph is None:
        logger.warning("Entity '%s': Unknown construction graph: %s", entity_id, state.graph)
        return []

    start = graph.find_node(state.node)
    if start is None or not start.edges:
        return []

    out: List[ResolvedRecipe] = []
    for edge in start.edges:
        if edge.conditions:
            continue
        target = graph.find_node(edge.to)
        if target is None:
            continue
        if len(edge.steps) != 1 or target.entity is None or target.entity == entity_id:
            continue

        step = edge.steps[0]
        if step.tool == ROLLING_TOOL:
            out.append(RollRecipe(solid_result=target.entity, solids={entity_id: 1}))
        elif step.min_temperature is not None and step.max_temperature is None:
            out.append(
                HeatRecipe(
                    solid_result=target.entity,
                    solids={entity_id: 1},
                    min_temp=step.min_temperature,
                )
            )
    return out
