#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Print the recipes one fork would ship.

Runs the build up to recipe normalization (no sprites, nothing written).

Usage:
    python devtools/inspect_recipes.py --fork wizden
    python devtools/inspect_recipes.py --fork ../space-station-14 --method cut
    python devtools/inspect_recipes.py --fork wizden FoodBreadPlain r!Dough
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console  # noqa: E402
from rich.logging import RichHandler  # noqa: E402
from rich.table import Table  # noqa: E402

from cookbook.config import cookbook_config  # noqa: E402
from cookbook.config.forks import ForkInfo, load_fork_list  # noqa: E402
from cookbook.constants import RECIPE_METHODS  # noqa: E402
from cookbook.engine import CookbookEngine  # noqa: E402
from cookbook.errors import CookbookError  # noqa: E402
from cookbook.schemas.resolved import ResolvedRecipe  # noqa: E402

console = Console()


def _resolve_fork(value: str, forks_path: Path) -> Tuple[str, ForkInfo, Path]:
    """A fork ID from the fork list, or a path to a game checkout."""
    candidate = Path(value).expanduser()
    if candidate.is_dir():
        fork = ForkInfo(
            name=candidate.name,
            description="",
            path=str(candidate.resolve()),
            repo="",
            method_entities={},
            mix_fill_state="",
        )
        return candidate.name, fork, Path.cwd()

    forks = load_fork_list(forks_path)
    if value not in forks:
        raise SystemExit(f"Unknown fork '{value}' (not a directory, not in {forks_path})")
    return value, forks[value], forks_path.parent


def _fmt_ingredients(recipe: ResolvedRecipe) -> str:
    parts: List[str] = [f"{eid} x{qty:g}" for eid, qty in recipe.solids.items()]
    for rid, ing in recipe.reagents.items():
        if ing.amount is None:
            parts.append(rid)
        elif ing.catalyst:
            parts.append(f"{rid} {ing.amount:g}u (catalyst)")
        else:
            parts.append(f"{rid} {ing.amount:g}u")
    return ", ".join(parts)


def _render(recipes: Dict[str, ResolvedRecipe], title: str) -> Table:
    table = Table(title=title, border_style="blue")
    table.add_column("ID", style="cyan")
    table.add_column("Method")
    table.add_column("Result", style="green")
    table.add_column("Ingredients", style="white")
    table.add_column("Group", style="dim")
    for key, recipe in recipes.items():
        result = recipe.solid_result or recipe.reagent_result or "-"
        if recipe.result_qty is not None:
            result = f"{result} x{recipe.result_qty:g}"
        table.add_row(key, recipe.method, result, _fmt_ingredients(recipe), recipe.group)
    return table


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Inspect the recipes of one fork")
    p.add_argument("--fork", required=True, help="Fork ID from the fork list, or a game checkout directory")
    p.add_argument("--forks", default=None, help="Fork list YAML (default from conf/settings.ini)")
    p.add_argument("--method", choices=RECIPE_METHODS, default=None, help="Only show recipes of this method")
    p.add_argument("ids", nargs="*", help="Recipe keys or result IDs to show")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    forks_path = Path(args.forks).resolve() if args.forks else cookbook_config.path("PATHS", "FORK_LIST")
    if forks_path is None:
        forks_path = PROJECT_ROOT / "conf" / "forks.yml"

    try:
        fork_id, fork, base_dir = _resolve_fork(args.fork, forks_path)
        recipes = CookbookEngine(fork_id, fork, base_dir).recipes()
    except CookbookError as e:
        console.print(f"[red]Inspect failed:[/red] {e}")
        return 1

    wanted = set(args.ids)
    shown = {
        key: r
        for key, r in recipes.items()
        if (args.method is None or r.method == args.method)
        and (not wanted or key in wanted or r.solid_result in wanted or r.reagent_result in wanted)
    }
    console.print(_render(shown, f"{fork_id}: {len(shown)} of {len(recipes)} recipes"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
