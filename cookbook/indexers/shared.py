# -*- coding: utf-8 -*-
"""Shared helpers for indexers."""

from __future__ import annotations

import hashlib
from typing import Dict, Iterable, Iterator, List, Set


def dedup_preserve(seq: Iterable[str]) -> List[str]:
    out: List[str] = []
    seen: Set[str] = set()
    for x in seq:
        if not x:
            continue
        if x in seen:
            continue
        seen.add(x)
        out.append(x)
    return out


def sha1_8(data: bytes) -> str:
    """Short content hash used in artifact file names."""
    return hashlib.sha1(data).hexdigest()[:8]


class UsedSet:
    """Insertion-ordered set of prototype IDs that only ever grows."""

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: Dict[str, None] = {}
        for x in ids:
            self.add(x)

    def add(self, proto_id: str) -> bool:
        """Add `proto_id`; True when it was not present before."""
        if proto_id in self._ids:
            return False
        self._ids[proto_id] = None
        return True

    def __contains__(self, proto_id: object) -> bool:
        return proto_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"UsedSet({list(self._ids)!r})"
