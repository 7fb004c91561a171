# -*- coding: utf-8 -*-
"""Exceptions that abort a build.

Recoverable problems (missing sprites, unknown construction graphs, bad
attribution metadata) are logged where they are found and never raised.
"""

from __future__ import annotations


class CookbookError(Exception):
    pass


class UnresolvedPrototypeError(CookbookError):
    """A used entity or reagent ID is missing from the raw dataset."""

    def __init__(self, kind: str, proto_id: str):
        super().__init__(f"Could not resolve {kind}: {proto_id}")
        self.kind = kind
        self.proto_id = proto_id


class ForkConfigError(CookbookError):
    pass


class RecipeShapeError(CookbookError):
    pass
