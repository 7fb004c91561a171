# -*- coding: utf-8 -*-
"""Sprite sheet builder.

Every shipped entity gets one 32x32 cell, followed by the cells for recipe
method entities, the Frontier microwave recipe types and finally the
beaker fill overlay. Cells are laid out left to right, 24 per row.

Textures are read from `<Resources/Textures>/<rsi path>/<state>.png`. A
missing texture leaves the cell blank; it never fails the build.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageColor

from cookbook.constants import COLOR_WHITE, SHEET_WIDTH, SPRITE_OFFSETS, SPRITE_SIZE
from cookbook.schemas.resolved import ResolvedEntity

__all__ = [
    "RenderLayer",
    "SpriteCache",
    "SpriteSheet",
    "build_sprite_sheet",
    "multiply_colors",
    "parse_color",
    "render_layers",
]

logger = logging.getLogger(__name__)

SpritePoint = Tuple[int, int]

INVALID_METADATA = "(invalid sprite metadata)"


# =========================================================
# Colours (0xRRGGBBAA)
# =========================================================

def parse_color(value: Optional[str]) -> int:
    if not value:
        return COLOR_WHITE
    try:
        rgba = ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unparseable sprite colour %r, using white", value)
        return COLOR_WHITE
    r, g, b = rgba[:3]
    a = rgba[3] if len(rgba) > 3 else 0xFF
    return (r << 24) | (g << 16) | (b << 8) | a


def multiply_colors(c1: int, c2: int) -> int:
    out = 0
    for shift in (24, 16, 8, 0):
        a = (c1 >> shift) & 0xFF
        b = (c2 >> shift) & 0xFF
        out |= ((a * b) // 255) << shift
    return out


def modulate(image: Image.Image, color: int) -> Image.Image:
    """Multiply the RGB channels of `image` by `color`; alpha is untouched."""
    arr = np.asarray(image.convert("RGBA"), dtype=np.uint16).copy()
    factors = np.array(
        [(color >> 24) & 0xFF, (color >> 16) & 0xFF, (color >> 8) & 0xFF],
        dtype=np.uint16,
    )
    arr[..., :3] = (arr[..., :3] * factors) // 255
    return Image.fromarray(arr.astype(np.uint8))


# =========================================================
# Layers
# =========================================================

@dataclass(frozen=True)
class RenderLayer:
    path: str
    state: str
    color: int = COLOR_WHITE


def render_layers(entity: ResolvedEntity) -> List[RenderLayer]:
    """Layers to draw for an entity, bottom first.

    The base state is drawn white; its colour comes through the sprite's
    outer colour instead.
    """
    sprite = entity.sprite
    out: List[RenderLayer] = []
    if sprite.path and sprite.state:
        out.append(RenderLayer(path=sprite.path, state=sprite.state))
    for layer in sprite.layers:
        if not layer.visible or not layer.state:
            continue
        path = layer.path or sprite.path
        if path is None:
            continue
        out.append(RenderLayer(path=path, state=layer.state, color=parse_color(layer.color)))
    return out


# =========================================================
# Texture cache + attributions
# =========================================================

@dataclass
class _Attribution:
    path: str
    license: str
    copyright: str
    sprites: Dict[SpritePoint, None] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "license": self.license,
            "copyright": self.copyright,
            "sprites": [list(p) for p in self.sprites],
        }


class SpriteCache:
    def __init__(self, texture_dir: Path):
        self.dir = Path(texture_dir)
        self._images: Dict[str, Image.Image] = {}
        self._attributions: Dict[str, _Attribution] = {}

    def read(self, path: str, state: str, for_entity: str, point: SpritePoint) -> Image.Image:
        self._attribution(path).sprites[tuple(point)] = None

        key = f"{path}/{state}.png"
        image = self._images.get(key)
        if image is None:
            full = self.dir / path / f"{state}.png"
            if full.exists():
                with Image.open(full) as im:
                    image = im.convert("RGBA").crop((0, 0, SPRITE_SIZE, SPRITE_SIZE))
            else:
                logger.error(
                    "Unable to resolve sprite path for state '%s' in '%s' for %s",
                    state,
                    path,
                    for_entity,
                )
                image = Image.new("RGBA", (SPRITE_SIZE, SPRITE_SIZE), (0, 0, 0, 0))
            self._images[key] = image
        return image

    def _attribution(self, path: str) -> _Attribution:
        attr = self._attributions.get(path)
        if attr is not None:
            return attr

        meta_path = self.dir / path / "meta.json"
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8-sig"))
            if not isinstance(meta, dict):
                raise ValueError("top-level value is not an object")
        except (OSError, ValueError) as e:
            logger.error("%s: Error parsing attributions: %s", meta_path, e)
            meta = {"license": INVALID_METADATA, "copyright": INVALID_METADATA}

        license_ = meta.get("license")
        copyright_ = meta.get("copyright")
        attr = _Attribution(
            path=path,
            license=license_ if isinstance(license_, str) else "",
            copyright=copyright_ if isinstance(copyright_, str) else "",
        )
        self._attributions[path] = attr
        return attr

    def attributions(self) -> List[Dict[str, Any]]:
        rows = sorted(self._attributions.values(), key=lambda a: (a.path.lower(), a.path))
        return [a.to_dict() for a in rows]


# =========================================================
# Sheet
# =========================================================

@dataclass
class SpriteSheet:
    sheet: Image.Image
    points: Dict[str, SpritePoint]
    methods: Dict[str, SpritePoint]
    beaker_fill_point: SpritePoint
    microwave_recipe_types: Optional[Dict[str, SpritePoint]]
    attributions: List[Dict[str, Any]]


def place_sprite(index: int) -> SpritePoint:
    return (SPRITE_SIZE * (index % SHEET_WIDTH), SPRITE_SIZE * (index // SHEET_WIDTH))


def _blit(sheet: Image.Image, sprite: Image.Image, x: int, y: int) -> None:
    # alpha_composite rejects negative destinations, so clip by hand.
    sx, sy = max(0, -x), max(0, -y)
    dx, dy = max(0, x), max(0, y)
    w = min(sprite.width - sx, sheet.width - dx)
    h = min(sprite.height - sy, sheet.height - dy)
    if w <= 0 or h <= 0:
        return
    sheet.alpha_composite(sprite, dest=(dx, dy), source=(sx, sy, sx + w, sy + h))


def _draw_sprite(
    sheet: Image.Image,
    point: SpritePoint,
    color: int,
    layers: Sequence[RenderLayer],
    cache: SpriteCache,
    for_entity: str,
    cell: SpritePoint,
) -> None:
    for layer in layers:
        sprite = cache.read(layer.path, layer.state, for_entity, cell)
        if color != COLOR_WHITE or layer.color != COLOR_WHITE:
            sprite = modulate(sprite, multiply_colors(color, layer.color))
        _blit(sheet, sprite, point[0], point[1])


def _draw_entity(sheet: Image.Image, index: int, entity: ResolvedEntity, cache: SpriteCache) -> SpritePoint:
    point = place_sprite(index)
    ox, oy = SPRITE_OFFSETS.get(entity.id, (0, 0))
    _draw_sprite(
        sheet,
        (point[0] + ox, point[1] + oy),
        parse_color(entity.sprite.color),
        render_layers(entity),
        cache,
        entity.id,
        point,
    )
    return point


def build_sprite_sheet(
    entities: Mapping[str, ResolvedEntity],
    method_entities: Mapping[str, ResolvedEntity],
    texture_dir: Path,
    mix_fill_state: str,
    microwave_type_entities: Optional[Mapping[str, ResolvedEntity]] = None,
) -> SpriteSheet:
    microwave = method_entities.get("microwave")
    reused = {
        subtype
        for subtype, ent in (microwave_type_entities or {}).items()
        if microwave is not None and ent.id == microwave.id
    }
    count = (
        len(entities)
        + len(method_entities)
        + len(microwave_type_entities or {})
        - len(reused)
        + 1  # beaker fill
    )
    width = SPRITE_SIZE * SHEET_WIDTH
    height = SPRITE_SIZE * max(1, math.ceil(count / SHEET_WIDTH))
    sheet = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    cache = SpriteCache(texture_dir)

    i = 0
    points: Dict[str, SpritePoint] = {}
    for eid, entity in entities.items():
        points[eid] = _draw_entity(sheet, i, entity, cache)
        i += 1

    methods: Dict[str, SpritePoint] = {}
    for method, entity in method_entities.items():
        methods[method] = _draw_entity(sheet, i, entity, cache)
        i += 1

    microwave_types: Optional[Dict[str, SpritePoint]] = None
    if microwave_type_entities is not None:
        microwave_types = {}
        for subtype, entity in microwave_type_entities.items():
            if subtype in reused:
                microwave_types[subtype] = methods["microwave"]
                continue
            microwave_types[subtype] = _draw_entity(sheet, i, entity, cache)
            i += 1

    beaker_fill_point = place_sprite(i)
    beaker = method_entities.get("mix")
    beaker_layers = render_layers(beaker) if beaker is not None else []
    if beaker is None or not beaker_layers:
        logger.warning("No mix method sprite, beaker fill left blank")
    else:
        _draw_sprite(
            sheet,
            beaker_fill_point,
            parse_color(beaker.sprite.color),
            [RenderLayer(path=beaker_layers[0].path, state=mix_fill_state)],
            cache,
            beaker.id,
            beaker_fill_point,
        )

    return SpriteSheet(
        sheet=sheet,
        points=points,
        methods=methods,
        beaker_fill_point=beaker_fill_point,
        microwave_recipe_types=microwave_types,
        attributions=cache.attributions(),
    )
