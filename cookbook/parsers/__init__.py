# -*- coding: utf-8 -*-
"""Readers for game prototype and locale files."""

from cookbook.parsers.locale import LocaleCatalog, parse_ftl
from cookbook.parsers.prototypes import (
    find_prototype_files,
    load_yaml_file,
    read_prototype_file,
    read_raw_game_data,
)

__all__ = [
    "LocaleCatalog",
    "find_prototype_files",
    "load_yaml_file",
    "parse_ftl",
    "read_prototype_file",
    "read_raw_game_data",
]
