#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import sys
from collections.abc import Sequence
from contextlib import contextmanager

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text
from rich.theme import Theme
from rich.tree import Tree

THEME = Theme(
    {
        "title": "bold cyan",
        "subtitle": "dim",
        "accent": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "panel": "cyan",
        "muted": "dim",
    }
)


def isatty(stream: object, fallback: object) -> bool:
    for candidate in (stream, fallback):
        isatty_fn = getattr(candidate, "isatty", None)
        if isatty_fn is None:
            continue
        try:
            return bool(isatty_fn())
        except (OSError, ValueError):
            continue
    return False


def _build_console(*, stderr: bool) -> Console:
    raw = sys.__stderr__ if stderr else sys.__stdout__
    fallback = sys.stderr if stderr else sys.stdout
    return Console(stderr=stderr, theme=THEME, force_terminal=isatty(raw, fallback) or None)


console = _build_console(stderr=False)
console_err = _build_console(stderr=True)


def configure_ui(*, no_color: bool) -> None:
    console.no_color = no_color
    console_err.no_color = no_color


@contextmanager
def status(message: str, *, quiet: bool):
    if quiet:
        yield None
        return
    with console_err.status(Text(message, style="subtitle"), spinner="dots") as live:
        yield live


@contextmanager
def progress(*, quiet: bool):
    if quiet:
        yield None
        return
    progress_bar = Progress(
        SpinnerColumn(style="accent"),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console_err,
        transient=True,
        disable=not isatty(sys.__stderr__, sys.stderr),
    )
    with progress_bar:
        yield progress_bar


def build_kv_table(rows: Sequence[tuple[str, str]], *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=box.SIMPLE, show_lines=False)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(str(key), str(value))
    return table


def build_action_list(items: Sequence[str]) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(no_wrap=True)
    table.add_column()
    for item in items:
        table.add_row("-", Text(item))
    return table


def panel(title: str, renderable, *, style: str = "panel") -> Panel:
    return Panel(
        renderable,
        title=title,
        title_align="left",
        border_style=style,
        box=box.ROUNDED,
        padding=(1, 2),
    )


def print_completion_panel(
    title: str,
    items: Sequence[str],
    *,
    quiet: bool,
    use_err: bool = False,
) -> None:
    if quiet:
        return
    output = console_err if use_err else console
    output.print(panel(title, build_action_list(items), style="success"))


def build_outputs_tree(label: str, paths: Sequence[str]) -> Tree:
    tree = Tree("Documents", guide_style="muted")
    branch = tree.add(f"[accent]{label}[/accent] ({len(paths)})")
    for path in paths:
        branch.add(path)
    return tree
