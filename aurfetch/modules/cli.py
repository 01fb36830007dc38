# aurfetch/modules/cli.py
"""
Command line front end for aurfetch.
- Uses rich for colored output, tables and a spinner while downloading.
- Each target is handled on its own: a missing or broken PKGBUILD is
  reported and the run continues with the next target.

Usage examples:
  aurfetch deps yay paru
  aurfetch -v -v -d ~/aur deps mypkg
  aurfetch show ./mypkg --format yaml
  aurfetch show ./a ./b --merged
  aurfetch foreign
"""

from __future__ import annotations
import argparse
import json
import os
import sys
import traceback
from typing import List, Optional

import yaml
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from aurfetch import AurfetchError, __version__
from aurfetch.modules import logger as _logger
from aurfetch.modules.aur import AurClient, AurError, AurPackage
from aurfetch.modules.config import AurfetchConfig, DEFAULT_PACMAN_CONF
from aurfetch.modules.depends import DependencyResolver
from aurfetch.modules.deplist import merge_sorted_dedup, strcmp
from aurfetch.modules.pacman import PackageDatabase
from aurfetch.modules.pkgbuild import (
    MalformedRecipe,
    RecipeNotFound,
    extract_flat_dependencies,
    populate_typed_dependencies,
    read_pkgbuild,
)


def make_console(no_color: bool, quiet: bool) -> Console:
    if no_color:
        return Console(color_system=None, highlight=False, quiet=quiet)
    return Console(quiet=quiet)


def _pkgbuild_file(path: str) -> str:
    if os.path.isdir(path):
        return os.path.join(path, "PKGBUILD")
    return path


def _package_name(path: str) -> str:
    path = os.path.abspath(path)
    if os.path.basename(path) == "PKGBUILD":
        path = os.path.dirname(path)
    return os.path.basename(path)


class CLI:
    def __init__(self, console: Console, cfg: AurfetchConfig):
        self.console = console
        self.cfg = cfg
        self.log = _logger.Logger("cli", cfg)

    def open_database(self) -> PackageDatabase:
        conf = self.cfg.get("pacman", "config", fallback=DEFAULT_PACMAN_CONF)
        return PackageDatabase(conf_path=conf, logger=_logger.Logger("pacman", self.cfg))

    # -----------------------
    # deps
    # -----------------------
    def cmd_deps(self, args: argparse.Namespace) -> int:
        console = self.console
        aur = AurClient.from_config(self.cfg, logger=_logger.Logger("aur", self.cfg))
        results = []
        failed = 0
        with self.open_database() as db:
            resolver = DependencyResolver(db, aur, self.cfg, logger=_logger.Logger("depends", self.cfg))
            for pkg in args.packages:
                with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                              console=console, transient=True) as p:
                    p.add_task(f"Resolving {pkg}", total=None)
                    try:
                        count = resolver.resolve_and_fetch(pkg)
                    except RecipeNotFound as e:
                        console.print("[red]!! Could not open PKGBUILD for dependency parsing.[/red]")
                        self.log.error(str(e))
                        results.append((pkg, "-", "missing PKGBUILD"))
                        failed += 1
                        continue
                    except (MalformedRecipe, AurError) as e:
                        console.print(f"[red]{pkg}: {e}[/red]")
                        self.log.error(f"{pkg}: {e}")
                        results.append((pkg, "-", "error"))
                        failed += 1
                        continue
                results.append((pkg, str(count), "ok"))

        table = Table(title="Dependencies fetched from the AUR")
        table.add_column("Package", style="bold")
        table.add_column("Fetched", justify="right")
        table.add_column("Status")
        for name, count, status in results:
            style = "green" if status == "ok" else "red"
            table.add_row(name, count, f"[{style}]{status}[/{style}]")
        console.print(table)
        return 1 if failed else 0

    # -----------------------
    # show
    # -----------------------
    def cmd_show(self, args: argparse.Namespace) -> int:
        console = self.console
        records = []
        merged = None
        failed = 0
        for path in args.paths:
            try:
                text = read_pkgbuild(_pkgbuild_file(path))
                if args.merged:
                    flat = extract_flat_dependencies(text, log=self.log).sorted(strcmp)
                    merged = merge_sorted_dedup(merged, flat, strcmp)
                else:
                    record = AurPackage(name=_package_name(path))
                    records.append(populate_typed_dependencies(record, text, log=self.log))
            except (RecipeNotFound, MalformedRecipe) as e:
                console.print(f"[red]{path}: {e}[/red]")
                self.log.error(str(e))
                failed += 1

        if args.merged:
            names = merged.to_list() if merged else []
            if args.format == "yaml":
                console.print(yaml.safe_dump({"depends": names}, sort_keys=False), end="", markup=False, highlight=False)
            elif args.format == "json":
                console.print_json(json.dumps({"depends": names}))
            else:
                console.print(Panel("\n".join(names) or "-", title="merged dependencies", style="cyan"))
            return 1 if failed else 0

        data = [r.to_dict() for r in records]
        for d in data:
            d.pop("version")
            d.pop("description")
        if args.format == "yaml":
            console.print(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), end="", markup=False, highlight=False)
        elif args.format == "json":
            console.print_json(json.dumps(data))
        else:
            for d in data:
                tbl = Table(title=f"PKGBUILD: {d['name']}")
                tbl.add_column("Array", style="bold")
                tbl.add_column("Entries", overflow="fold")
                for key in ("depends", "makedepends", "optdepends"):
                    tbl.add_row(key, "\n".join(d[key]) if d[key] else "-")
                console.print(tbl)
        return 1 if failed else 0

    # -----------------------
    # foreign
    # -----------------------
    def cmd_foreign(self, args: argparse.Namespace) -> int:
        with self.open_database() as db:
            for name in db.query_foreign():
                self.console.print(name, markup=False, highlight=False)
        return 0


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="aurfetch", description="Fetch AUR dependencies of PKGBUILDs (rich-enabled)")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--no-color", action="store_true", help="Disable color output")
    ap.add_argument("--quiet", action="store_true", help="Quiet mode; less output")
    ap.add_argument("--conf", help="Path to aurfetch.conf")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More output (repeat for debug)")
    ap.add_argument("-d", "--download-dir", help="Directory holding package sources")
    sub = ap.add_subparsers(dest="command", required=True)

    p_deps = sub.add_parser("deps", aliases=["d"], help="Fetch AUR dependencies of downloaded packages")
    p_deps.add_argument("packages", nargs="+", help="Package directories under the download dir")

    p_show = sub.add_parser("show", aliases=["s"], help="Show dependency arrays of PKGBUILDs")
    p_show.add_argument("paths", nargs="+", help="PKGBUILD files or directories containing one")
    p_show.add_argument("--format", choices=("table", "yaml", "json"), default="table")
    p_show.add_argument("--merged", action="store_true",
                        help="Print the sorted union of depends+makedepends of all recipes")

    sub.add_parser("foreign", aliases=["f"], help="List installed packages not found in any repository")
    return ap


def load_config(args: argparse.Namespace) -> AurfetchConfig:
    cfg = AurfetchConfig([args.conf]) if args.conf else AurfetchConfig()
    if args.verbose:
        cfg.set("options", "verbose", args.verbose)
    if args.quiet:
        cfg.set("options", "quiet", "true")
    if args.no_color:
        cfg.set("options", "color", "false")
    if args.download_dir:
        cfg.set("options", "download_dir", args.download_dir)
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_argparser()
    args = parser.parse_args(argv)
    cfg = load_config(args)
    console = make_console(not cfg.color, cfg.quiet)
    cli = CLI(console, cfg)

    cmd = args.command
    try:
        if cmd in ("deps", "d"):
            return cli.cmd_deps(args)
        if cmd in ("show", "s"):
            return cli.cmd_show(args)
        if cmd in ("foreign", "f"):
            return cli.cmd_foreign(args)
        console.print("[red]Unknown command[/red]")
        return 2
    except AurfetchError as e:
        console.print(f"[red]error: {e}[/red]")
        cli.log.error(str(e))
        return 2
    except Exception as e:
        console.print(f"[red]Unhandled CLI error: {e}[/red]")
        cli.log.error(traceback.format_exc())
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
