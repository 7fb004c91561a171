# -*- coding: utf-8 -*-
"""Write built forks to disk.

Layout below the output directory:

    data/index.json                      fork list
    data/data_{fork}.{hash}.json         game data per fork
    img/sprites_{fork}.{hash}.webp       sprite sheet per fork

Hashes are the first 8 hex digits of a SHA-1 over the content, so a
changed build always gets a new file name.
"""

from __future__ import annotations

import io
import json
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from PIL import Image

from cookbook.constants import (
    FORK_LIST_PATH,
    game_data_path,
    sprite_sheet_file_name,
    sprite_sheet_path,
)
from cookbook.indexers.shared import sha1_8
from cookbook.indexers.specials import traits_mask
from cookbook.schemas.meta import build_meta

if TYPE_CHECKING:
    from cookbook.engine import ProcessedGameData

__all__ = [
    "GAME_DATA_SCHEMA",
    "encode_json",
    "game_data_document",
    "save_data",
    "sprite_sheet_png",
    "write_fork",
]

logger = logging.getLogger(__name__)

GAME_DATA_SCHEMA = 1


def encode_json(doc: Any) -> str:
    return json.dumps(doc, ensure_ascii=False, separators=(",", ":"))


def sprite_sheet_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def game_data_document(d: "ProcessedGameData", sprite_hash: str) -> Dict[str, Any]:
    entities: List[Dict[str, Any]] = []
    for eid, entity in d.entities.items():
        row: Dict[str, Any] = {
            "id": eid,
            "name": entity.name,
            "sprite": list(d.sprites.points[eid]),
            "traits": traits_mask(entity, d.specials),
        }
        if entity.food_sequence_start is not None:
            row["foodSequenceStart"] = {
                "key": entity.food_sequence_start.key,
                "maxLayers": entity.food_sequence_start.max_layers,
            }
        if entity.food_sequence_element:
            row["foodSequenceElement"] = list(entity.food_sequence_element)
        entities.append(row)

    reagents: List[Dict[str, Any]] = []
    for rid, reagent in d.reagents.items():
        reagents.append(
            {
                "id": rid,
                "name": reagent.name,
                "color": reagent.color,
                "sources": list(d.reagent_sources.get(rid, [])),
            }
        )

    ingredients: Dict[str, None] = {}
    recipes: List[Dict[str, Any]] = []
    for key, recipe in d.recipes.items():
        recipes.append(recipe.to_dict(key))
        for solid in recipe.solids:
            ingredients[solid] = None

    microwave_recipe_types: Optional[Dict[str, Any]] = None
    if d.microwave_recipe_types and d.sprites.microwave_recipe_types:
        microwave_recipe_types = {
            subtype: {
                "sprite": list(point),
                "verb": d.microwave_recipe_types[subtype].verb,
                "filterSummary": d.microwave_recipe_types[subtype].filter_summary,
            }
            for subtype, point in d.sprites.microwave_recipe_types.items()
        }

    return {
        "entities": entities,
        "reagents": reagents,
        "ingredients": list(ingredients),
        "recipes": recipes,
        "methodSprites": {m: list(p) for m, p in d.sprites.methods.items()},
        "beakerFill": list(d.sprites.beaker_fill_point),
        "microwaveRecipeTypes": microwave_recipe_types,
        "spriteSheet": sprite_sheet_file_name(d.id, sprite_hash),
        "sortingIdRewrites": dict(d.sorting_id_rewrites),
        "specialTraits": [s.to_dict() for s in d.specials],
        "attributions": d.sprites.attributions,
    }


def _write_text(path: Path, text: str) -> None:
    if not path.exists():
        logger.info("Create: %s", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def write_fork(d: "ProcessedGameData", out_dir: Path, *, date_ms: Optional[int] = None) -> Dict[str, Any]:
    """Write one fork's data and sprite sheet; return its fork list entry."""
    out = Path(out_dir)

    png = sprite_sheet_png(d.sprites.sheet)
    sprite_hash = sha1_8(png)
    sheet_path = out / sprite_sheet_path(d.id, sprite_hash)
    if not sheet_path.exists():
        logger.info("Create: %s", sheet_path)
    sheet_path.parent.mkdir(parents=True, exist_ok=True)
    d.sprites.sheet.save(sheet_path, format="WEBP", lossless=True)

    doc = game_data_document(d, sprite_hash)
    # The hash covers the content only; meta changes on every run.
    data_hash = sha1_8(encode_json(doc).encode("utf-8"))
    doc["meta"] = build_meta(schema=GAME_DATA_SCHEMA, tool="cookbook-build", extra={"commit": d.commit_hash})
    _write_text(out / game_data_path(d.id, data_hash), encode_json(doc))

    entry: Dict[str, Any] = {
        "id": d.id,
        "hash": data_hash,
        "name": d.name,
        "description": d.description,
        "default": d.default,
    }
    if d.hidden:
        entry["hidden"] = True
    entry["meta"] = {
        "commit": d.commit_hash,
        "repo": d.repo,
        "date": date_ms if date_ms is not None else int(time.time() * 1000),
    }
    return entry


def save_data(forks: Sequence["ProcessedGameData"], out_dir: Path) -> List[Dict[str, Any]]:
    now = int(time.time() * 1000)
    index = [write_fork(d, out_dir, date_ms=now) for d in forks]
    _write_text(Path(out_dir) / FORK_LIST_PATH, encode_json(index))
    return index
