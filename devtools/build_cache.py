#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build signatures for skipping unchanged cookbook builds.

A signature is a small JSON-able dict describing the inputs (mtime + size)
of a build. When the stored signature for a fork equals the fresh one and
its outputs still exist, the fork does not need to be rebuilt.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from cookbook.constants import LOCALE_SUBPATH, PROTOTYPES_SUBPATH, TEXTURES_SUBPATH

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CACHE_PATH = PROJECT_ROOT / "data" / ".build_cache.json"


def load_cache(path: Optional[Path] = None) -> Dict[str, Any]:
    p = path or DEFAULT_CACHE_PATH
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_cache(cache: Dict[str, Any], path: Optional[Path] = None) -> None:
    p = path or DEFAULT_CACHE_PATH
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(cache, ensure_ascii=False, indent=2), encoding="utf-8")


def file_sig(path: Path) -> Dict[str, Any]:
    p = Path(path)
    try:
        st = p.stat()
    except OSError:
        return {"path": str(p), "exists": False}
    return {
        "path": str(p),
        "exists": True,
        "mtime_ns": int(st.st_mtime_ns),
        "size": int(st.st_size),
    }


def files_sig(paths: Iterable[Path], *, label: str = "") -> Dict[str, Any]:
    count = 0
    max_mtime = 0
    total_size = 0
    for p in paths:
        try:
            st = p.stat()
        except OSError:
            continue
        count += 1
        total_size += int(st.st_size)
        max_mtime = max(max_mtime, int(st.st_mtime_ns))
    return {
        "label": label,
        "count": count,
        "max_mtime_ns": max_mtime,
        "total_size": total_size,
    }


def paths_sig(paths: Iterable[Path]) -> List[Dict[str, Any]]:
    rows = [file_sig(p) for p in paths]
    rows.sort(key=lambda x: x.get("path") or "")
    return rows


def dir_sig(
    path: Path,
    *,
    suffixes: Optional[Iterable[str]] = None,
    glob: str = "**/*",
    label: str = "",
) -> Dict[str, Any]:
    p = Path(path)
    if not p.is_dir():
        return {"path": str(p), "exists": False, "label": label}
    suffixes_lc = {s.lower() for s in (suffixes or [])}
    files = []
    for fp in p.glob(glob):
        if not fp.is_file():
            continue
        if suffixes_lc and fp.suffix.lower() not in suffixes_lc:
            continue
        files.append(fp)
    base = files_sig(files, label=label)
    base["path"] = str(p)
    base["exists"] = True
    return base


def fork_sig(fork_id: str, fork_settings: Dict[str, Any], root: Path, rewrite_paths: Iterable[Path]) -> Dict[str, Any]:
    """Signature of everything one fork build reads."""
    return {
        "fork": fork_id,
        "settings": fork_settings,
        "prototypes": dir_sig(root / PROTOTYPES_SUBPATH, suffixes=[".yml"], label="prototypes"),
        "locale": dir_sig(root / LOCALE_SUBPATH, suffixes=[".ftl"], label="locale"),
        "textures": dir_sig(root / TEXTURES_SUBPATH, suffixes=[".png", ".json"], label="textures"),
        "rewrites": paths_sig(rewrite_paths),
    }
