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

import typer

from ...render.service import allocator_from_settings
from ..core.common import _ctx_value, _load_config, _run_cli
from ..ui import build_kv_table, console, panel

_NUMBER_HELP = "Inspect or advance the per-tenant reference number sequence."

number_app = typer.Typer(help=_NUMBER_HELP, no_args_is_help=True)


def register(app: typer.Typer) -> None:
    app.add_typer(number_app, name="number")


@number_app.command("next", help="Allocate the next reference number and print it.")
def next_number(
    ctx: typer.Context,
    tenant: str = typer.Option(..., "--tenant", help="Numbering tenant."),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        allocator = allocator_from_settings(config.numbering)
        console.print(allocator.allocate(tenant))

    _run_cli(_run, debug=debug)


@number_app.command("show", help="Show the last allocated reference number.")
def show_number(
    ctx: typer.Context,
    tenant: str = typer.Option(..., "--tenant", help="Numbering tenant."),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))
    quiet = bool(_ctx_value(ctx, "quiet"))

    def _run() -> None:
        config = _load_config(ctx)
        allocator = allocator_from_settings(config.numbering)
        current = allocator.peek(tenant)
        last = allocator.format(current) if current is not None else "none"
        if quiet:
            console.print(last)
            return
        upcoming = (allocator.baseline if current is None else current) + 1
        rows = [
            ("Tenant", tenant),
            ("Last number", last),
            ("Next number", allocator.format(upcoming)),
            ("Database", config.numbering.resolved_database_url),
        ]
        console.print(panel("Numbering", build_kv_table(rows)))

    _run_cli(_run, debug=debug)
