# -*- coding: utf-8 -*-
"""Fluent (FTL) locale reader.

Only the subset needed for display names is understood: `key = value`
messages and terms, indented continuation lines, and simple `{ -term }` /
`{ message }` references. Attributes and selectors are skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional

__all__ = ["LocaleCatalog", "parse_ftl"]

logger = logging.getLogger(__name__)

_ENTRY_RE = re.compile(r"^(-?[A-Za-z][A-Za-z0-9_-]*)\s*=\s*(.*)$")
_REF_RE = re.compile(r"\{\s*(-?[A-Za-z][A-Za-z0-9_-]*)\s*\}")
_LITERAL_RE = re.compile(r"\{\s*\"([^\"]*)\"\s*\}")


def parse_ftl(text: str) -> Dict[str, str]:
    """Return raw message/term patterns keyed by identifier (terms keep their `-`)."""
    out: Dict[str, str] = {}
    key: Optional[str] = None
    lines: list = []

    def flush() -> None:
        if key is not None:
            out[key] = "\n".join(x for x in lines if x).strip()

    for raw_line in text.splitlines():
        line = raw_line.rstrip()
        if not line:
            continue
        if line.startswith("#"):
            flush()
            key, lines = None, []
            continue
        if line[0] in " \t":
            stripped = line.strip()
            # `.attr = ...` lines and selector variants are not part of the value
            if key is None or stripped.startswith((".", "[", "*[", "}")):
                continue
            lines.append(stripped)
            continue

        flush()
        m = _ENTRY_RE.match(line)
        if m:
            key, lines = m.group(1), [m.group(2).strip()]
        else:
            key, lines = None, []
    flush()
    return out


class LocaleCatalog:
    def __init__(self, messages: Optional[Dict[str, str]] = None):
        self.messages: Dict[str, str] = dict(messages or {})

    @classmethod
    def load(cls, locale_dir: Path) -> "LocaleCatalog":
        root = Path(locale_dir)
        messages: Dict[str, str] = {}
        if not root.is_dir():
            logger.warning("Locale directory does not exist: %s", root)
            return cls(messages)
        for path in sorted(root.rglob("*.ftl")):
            messages.update(parse_ftl(path.read_text(encoding="utf-8-sig")))
        logger.debug("Loaded %d locale entries from %s", len(messages), root)
        return cls(messages)

    def __contains__(self, key: str) -> bool:
        return key in self.messages

    def _format(self, pattern: str, depth: int) -> str:
        pattern = _LITERAL_RE.sub(lambda m: m.group(1), pattern)
        if depth <= 0:
            return pattern

        def repl(m: re.Match) -> str:
            ref = self.messages.get(m.group(1))
            return self._format(ref, depth - 1) if ref is not None else m.group(0)

        return _REF_RE.sub(repl, pattern)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        pattern = self.messages.get(key)
        if pattern is None:
            return default
        return self._format(pattern, depth=4)
