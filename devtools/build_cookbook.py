#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Build cookbook data for every fork in the fork list.

Usage:
    python devtools/build_cookbook.py
    python devtools/build_cookbook.py --forks conf/forks.yml --out public --only wizden
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console  # noqa: E402
from rich.logging import RichHandler  # noqa: E402
from rich.table import Table  # noqa: E402

from cookbook.config import cookbook_config  # noqa: E402
from cookbook.config.forks import ForkInfo, load_fork_list  # noqa: E402
from cookbook.engine import CookbookEngine, ProcessedGameData  # noqa: E402
from cookbook.errors import CookbookError  # noqa: E402
from cookbook.serializer import save_data  # noqa: E402
from devtools.build_cache import file_sig, fork_sig, load_cache, save_cache  # noqa: E402

console = Console()
logger = logging.getLogger("cookbook.build")

CACHE_KEY = "cookbook"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _default_path(key: str, fallback: str) -> Path:
    p = cookbook_config.path("PATHS", key)
    return p if p is not None else PROJECT_ROOT / fallback


def _outputs_sig(out_dir: Path, index: List[Dict]) -> Dict:
    # Hashed file names change with content; the fork list is enough to
    # notice deleted or replaced outputs.
    return {
        "index": file_sig(out_dir / "data" / "index.json"),
        "forks": [e.get("hash") for e in index],
    }


def _render_summary(forks: List[ProcessedGameData]) -> Table:
    table = Table(title="Cookbook build")
    table.add_column("Fork", style="cyan")
    table.add_column("Commit")
    table.add_column("Entities", justify="right")
    table.add_column("Reagents", justify="right")
    table.add_column("Recipes", justify="right")
    table.add_column("Specials", justify="right")
    for d in forks:
        table.add_row(
            d.id,
            d.commit_hash[:10],
            str(len(d.entities)),
            str(len(d.reagents)),
            str(len(d.recipes)),
            str(len(d.specials)),
        )
    return table


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Build cookbook data for all forks")
    p.add_argument("--forks", default=None, help="Fork list YAML (default from conf/settings.ini)")
    p.add_argument("--out", default=None, help="Output directory (default from conf/settings.ini)")
    p.add_argument("--only", action="append", default=[], help="Build only this fork (repeatable)")
    p.add_argument("--cache", default=None, help="Build cache file (default from conf/settings.ini)")
    p.add_argument("--force", action="store_true", help="Force rebuild even if cache matches")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    _setup_logging(bool(args.verbose))

    forks_path = Path(args.forks).resolve() if args.forks else _default_path("FORK_LIST", "conf/forks.yml")
    out_dir = Path(args.out).resolve() if args.out else _default_path("OUT_DIR", "public")
    cache_path = Path(args.cache).resolve() if args.cache else _default_path("CACHE_FILE", "data/.build_cache.json")

    try:
        forks: Dict[str, ForkInfo] = load_fork_list(forks_path)
        if args.only:
            unknown = [f for f in args.only if f not in forks]
            if unknown:
                console.print(f"[red]Unknown fork(s): {', '.join(unknown)}[/red]")
                return 2
            forks = {fid: fork for fid, fork in forks.items() if fid in args.only}

        base_dir = forks_path.parent
        engines = {fid: CookbookEngine(fid, fork, base_dir) for fid, fork in forks.items()}
        inputs_sig = {
            "fork_list": file_sig(forks_path),
            "forks": [
                fork_sig(
                    fid,
                    engine.fork.model_dump(mode="json", by_alias=True),
                    engine.root,
                    engine.rewrite_paths(),
                )
                for fid, engine in engines.items()
            ],
        }

        cache = load_cache(cache_path)
        entry = cache.get(CACHE_KEY) or {}
        if not args.force and entry.get("signature") == inputs_sig:
            if entry.get("outputs") == _outputs_sig(out_dir, entry.get("index") or []):
                console.print("[green]Cookbook data up-to-date; skip rebuild[/green]")
                return 0

        built: List[ProcessedGameData] = []
        for engine in engines.values():
            built.append(engine.build())
            console.print("")

        logger.info("Finished building everything. Writing data...")
        index = save_data(built, out_dir)
    except CookbookError as e:
        console.print(f"[red]Build failed:[/red] {e}")
        return 1

    cache[CACHE_KEY] = {
        "signature": inputs_sig,
        "index": index,
        "outputs": _outputs_sig(out_dir, index),
    }
    save_cache(cache, cache_path)

    console.print(_render_summary(built))
    console.print(f"[green]Cookbook data written: {out_dir}[/green]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
