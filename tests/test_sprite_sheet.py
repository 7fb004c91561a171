# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging

import pytest
from PIL import Image

from cookbook.assets.sprite_sheet import (
    INVALID_METADATA,
    build_sprite_sheet,
    multiply_colors,
    parse_color,
    render_layers,
)
from cookbook.constants import COLOR_WHITE, SHEET_WIDTH, SPRITE_SIZE

FOOD_RSI = "Objects/Consumable/Food/food.rsi"
MACHINE_RSI = "Structures/Machines/microwave.rsi"
BEAKER_RSI = "Objects/Specific/Chemistry/beaker.rsi"


def _texture(root, rsi, state, color=(255, 255, 255, 255), *, meta=True):
    folder = root / rsi
    folder.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (SPRITE_SIZE, SPRITE_SIZE), color).save(folder / f"{state}.png")
    if meta:
        (folder / "meta.json").write_text(
            json.dumps({"version": 1, "license": "CC-BY-SA-3.0", "copyright": f"Taken from {rsi}"}),
            encoding="utf-8",
        )


@pytest.fixture
def textures(tmp_path):
    root = tmp_path / "Textures"
    _texture(root, FOOD_RSI, "apple", (200, 0, 0, 255))
    _texture(root, FOOD_RSI, "white", (255, 255, 255, 255))
    _texture(root, MACHINE_RSI, "mw", (90, 90, 90, 255))
    _texture(root, BEAKER_RSI, "beaker", (10, 10, 10, 255))
    _texture(root, BEAKER_RSI, "fill1", (255, 255, 255, 255))
    return root


@pytest.fixture
def sprites(game):
    game.entity("FoodApple", name="apple", sprite={"sprite": FOOD_RSI, "state": "apple"})
    game.entity("FoodLime", name="lime", sprite={"sprite": FOOD_RSI, "state": "white", "color": "#00ff00"})
    game.entity("KitchenMicrowave", name="microwave", sprite={"sprite": MACHINE_RSI, "state": "mw"})
    game.entity("KitchenAssembler", name="assembler", sprite={"sprite": MACHINE_RSI, "state": "mw"})
    game.entity(
        "Beaker",
        name="beaker",
        sprite={"sprite": BEAKER_RSI, "color": "#ff0000", "layers": [{"state": "beaker"}]},
    )
    return game.resolved()


def _pixel(sheet, point):
    return sheet.getpixel((point[0] + SPRITE_SIZE // 2, point[1] + SPRITE_SIZE // 2))


def test_cells_are_placed_in_order(sprites, textures):
    entities = {k: sprites[k] for k in ("FoodApple", "FoodLime")}
    methods = {"microwave": sprites["KitchenMicrowave"], "mix": sprites["Beaker"]}

    out = build_sprite_sheet(entities, methods, textures, "fill1")

    assert out.points == {"FoodApple": (0, 0), "FoodLime": (32, 0)}
    assert out.methods == {"microwave": (64, 0), "mix": (96, 0)}
    assert out.beaker_fill_point == (128, 0)
    assert out.microwave_recipe_types is None
    assert out.sheet.size == (SPRITE_SIZE * SHEET_WIDTH, SPRITE_SIZE)

    assert _pixel(out.sheet, out.points["FoodApple"]) == (200, 0, 0, 255)
    # White texture tinted by the sprite colour.
    assert _pixel(out.sheet, out.points["FoodLime"]) == (0, 255, 0, 255)
    # Fill state drawn with the beaker's colour.
    assert _pixel(out.sheet, out.beaker_fill_point) == (255, 0, 0, 255)


def test_sheet_wraps_rows(game, textures):
    for i in range(SHEET_WIDTH + 1):
        game.entity(f"Food{i}", name=str(i), sprite={"sprite": FOOD_RSI, "state": "apple"})
    resolved = game.resolved()

    out = build_sprite_sheet(resolved, {}, textures, "fill1")

    assert out.points[f"Food{SHEET_WIDTH}"] == (0, SPRITE_SIZE)
    assert out.beaker_fill_point == (SPRITE_SIZE, SPRITE_SIZE)
    assert out.sheet.size == (SPRITE_SIZE * SHEET_WIDTH, 2 * SPRITE_SIZE)


def test_microwave_type_reuses_microwave_cell(sprites, textures):
    methods = {"microwave": sprites["KitchenMicrowave"], "mix": sprites["Beaker"]}
    types = {"microwave": sprites["KitchenMicrowave"], "assembler": sprites["KitchenAssembler"]}

    out = build_sprite_sheet({}, methods, textures, "fill1", types)

    assert out.microwave_recipe_types == {"microwave": (0, 0), "assembler": (64, 0)}
    assert out.beaker_fill_point == (96, 0)


def test_missing_texture_leaves_cell_blank(game, textures, caplog):
    game.entity("FoodGhost", name="ghost", sprite={"sprite": FOOD_RSI, "state": "nope"})

    with caplog.at_level(logging.ERROR, logger="cookbook.assets.sprite_sheet"):
        out = build_sprite_sheet(game.resolved(), {}, textures, "fill1")

    assert _pixel(out.sheet, out.points["FoodGhost"]) == (0, 0, 0, 0)
    assert "Unable to resolve sprite path for state 'nope'" in caplog.text
    assert "FoodGhost" in caplog.text


def test_missing_mix_entity_leaves_fill_blank(sprites, textures, caplog):
    with caplog.at_level(logging.WARNING, logger="cookbook.assets.sprite_sheet"):
        out = build_sprite_sheet({}, {"microwave": sprites["KitchenMicrowave"]}, textures, "fill1")

    assert _pixel(out.sheet, out.beaker_fill_point) == (0, 0, 0, 0)
    assert "beaker fill left blank" in caplog.text


def test_attributions(sprites, textures, caplog):
    entities = {"FoodApple": sprites["FoodApple"], "FoodLime": sprites["FoodLime"]}
    methods = {"mix": sprites["Beaker"]}

    with caplog.at_level(logging.ERROR, logger="cookbook.assets.sprite_sheet"):
        out = build_sprite_sheet(entities, methods, textures, "fill1")

    by_path = {a["path"]: a for a in out.attributions}
    assert [a["path"] for a in out.attributions] == [FOOD_RSI, BEAKER_RSI]
    assert by_path[FOOD_RSI]["license"] == "CC-BY-SA-3.0"
    assert by_path[FOOD_RSI]["sprites"] == [[0, 0], [32, 0]]
    # Beaker cell and beaker fill cell.
    assert by_path[BEAKER_RSI]["sprites"] == [[64, 0], [96, 0]]
    assert caplog.text == ""


def test_attribution_without_meta(game, textures, caplog):
    _texture(textures, "Objects/nometa.rsi", "a", meta=False)
    game.entity("FoodNoMeta", name="x", sprite={"sprite": "Objects/nometa.rsi", "state": "a"})

    with caplog.at_level(logging.ERROR, logger="cookbook.assets.sprite_sheet"):
        out = build_sprite_sheet(game.resolved(), {}, textures, "fill1")

    (attr,) = out.attributions
    assert attr["license"] == INVALID_METADATA
    assert attr["copyright"] == INVALID_METADATA
    assert "Error parsing attributions" in caplog.text


def test_render_layers(game):
    game.entity(
        "FoodStack",
        name="stack",
        sprite={
            "sprite": FOOD_RSI,
            "state": "base",
            "layers": [
                {"state": "top", "color": "#0000ff"},
                {"state": "hidden", "visible": False},
                {"sprite": "Other/thing.rsi", "state": "other"},
            ],
        },
    )

    layers = render_layers(game.resolved()["FoodStack"])

    assert [(l.path, l.state) for l in layers] == [
        (FOOD_RSI, "base"),
        (FOOD_RSI, "top"),
        ("Other/thing.rsi", "other"),
    ]
    assert layers[0].color == COLOR_WHITE
    assert layers[1].color == 0x0000FFFF


def test_colors(caplog):
    assert parse_color(None) == COLOR_WHITE
    assert parse_color("#ff8000") == 0xFF8000FF
    assert parse_color("#ff800080") == 0xFF800080
    assert multiply_colors(0xFF8000FF, 0x80FFFFFF) == 0x808000FF

    with caplog.at_level(logging.WARNING, logger="cookbook.assets.sprite_sheet"):
        assert parse_color("not a colour") == COLOR_WHITE
    assert "Unparseable sprite colour" in caplog.text
