# -*- coding: utf-8 -*-
"""Game defaults and output layout constants.

The `Default*` values mirror field defaults of the game's own prototypes and
components. If the game changes a default, change it here too.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

# MicrowaveMealRecipePrototype.CookTime
DEFAULT_COOK_TIME = 5

# MicrowaveMealRecipePrototype.Group
DEFAULT_RECIPE_GROUP = "Other"

# SliceableFoodComponent.TotalCount
DEFAULT_TOTAL_SLICE_COUNT = 5

# FoodSequenceStartPointComponent.MaxLayers
DEFAULT_FOOD_SEQUENCE_MAX_LAYERS = 10

# Every food in the game keeps its edible reagents in a solution called `food`.
FOOD_SOLUTION_NAME = "food"

DEFAULT_REAGENT_COLOR = "#ffffff"

UNKNOWN_ENTITY_NAME = "(unknown name)"

RECIPE_METHODS: Tuple[str, ...] = (
    "microwave",
    "mix",
    "cut",
    "roll",
    "heat",
    "deepFry",
    "construct",
)

# Reactions producing reagents in these groups never count as food reactions.
NON_FOOD_REAGENT_GROUPS: FrozenSet[str] = frozenset({"Medicine", "Narcotics", "Toxins"})

# The tool name a construction step must use to count as rolling.
ROLLING_TOOL = "Rolling"

# Reaction effect tags that spawn a solid entity.
SOLID_RESULT_EFFECTS: FrozenSet[str] = frozenset({"CreateEntityReactionEffect", "SpawnEntity"})

# Per-fork sub paths inside a game checkout.
PROTOTYPES_SUBPATH = "Resources/Prototypes"
LOCALE_SUBPATH = "Resources/Locale/en-US"
TEXTURES_SUBPATH = "Resources/Textures"

# Sprite sheet layout. All item sprites are 32x32 throughout the game.
SPRITE_SIZE = 32
SHEET_WIDTH = 24  # cells per row

COLOR_WHITE = 0xFFFFFFFF

# (x, y) pixel offsets for sprites that are not centred in their 32x32 box.
# Positive y moves the sprite down. Keep this list small, game updates break it.
SPRITE_OFFSETS: Dict[str, Tuple[int, int]] = {
    # Table-mounted machines are all weirdly high up
    "KitchenMicrowave": (0, 5),
    "KitchenElectricGrill": (0, 5),
    "KitchenAssembler": (0, 5),
    "ChemistryHotplate": (0, 5),
    "FoodBurgerSuper": (0, 5),
    "FoodBurgerBig": (0, 4),
    "FoodAloe": (0, -4),
    "AloeCream": (0, -2),
    "DrinkShaker": (0, 3),
}


def game_data_path(fork_id: str, digest: str) -> str:
    return f"data/data_{fork_id}.{digest}.json"


FORK_LIST_PATH = "data/index.json"


def sprite_sheet_file_name(fork_id: str, digest: str) -> str:
    return f"sprites_{fork_id}.{digest}.webp"


def sprite_sheet_path(fork_id: str, digest: str) -> str:
    return f"img/{sprite_sheet_file_name(fork_id, digest)}"
