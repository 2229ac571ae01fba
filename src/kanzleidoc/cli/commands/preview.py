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

from pathlib import Path

import typer

from ...render.assembler import ASSEMBLY_MODES, MODE_PARTITION
from ...render.doc_types import DOC_TYPE_FREE, DOC_TYPES
from ...render.service import RenderService, prober_from_settings, write_html_pages
from ...render.substitution import MODE_STANDARD, MODES
from ..core.common import _ctx_value, _load_config, _run_cli
from ..core.log import _warn
from ..core.selection import _salutation_callback, build_selection
from ..ui import build_kv_table, build_outputs_tree, console, panel, status

_PREVIEW_HELP = (
    "Paginate a template into per-page HTML files without allocating a number.\n\n"
    "TEMPLATE is either an HTML file or a document type whose template is taken\n"
    "from the active design. Preview documents carry a random IN-0 number.\n\n"
    "Examples:\n"
    "  kanzleidoc preview ./entwurf.html --out-dir preview\n"
    "  kanzleidoc preview rechnung --data akten.toml --customer c1 --mode enriched\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_PREVIEW_HELP)(preview)


def preview(
    ctx: typer.Context,
    template: str = typer.Argument(..., help="Template file or document type."),
    data: Path | None = typer.Option(
        None,
        "--data",
        "-d",
        help="TOML file with entity records.",
        rich_help_panel="Entities",
    ),
    law_firm: str | None = typer.Option(None, "--law-firm", rich_help_panel="Entities"),
    customer: str | None = typer.Option(None, "--customer", rich_help_panel="Entities"),
    bank_account: str | None = typer.Option(None, "--bank-account", rich_help_panel="Entities"),
    insolvent: str | None = typer.Option(None, "--insolvent", rich_help_panel="Entities"),
    carrier: str | None = typer.Option(None, "--carrier", rich_help_panel="Entities"),
    vehicles: list[str] | None = typer.Option(None, "--vehicle", rich_help_panel="Entities"),
    discount: str | None = typer.Option(None, "--discount", rich_help_panel="Entities"),
    salutation: str | None = typer.Option(
        None,
        "--salutation",
        callback=_salutation_callback,
        rich_help_panel="Entities",
    ),
    doc_type: str = typer.Option(
        DOC_TYPE_FREE,
        "--doc-type",
        help="Document type checked for required entities when TEMPLATE is a file.",
        rich_help_panel="Template",
    ),
    mode: str = typer.Option(
        MODE_STANDARD,
        "--mode",
        "-m",
        help="standard (entity fields only) or enriched (adds financials and derived fields).",
        rich_help_panel="Template",
    ),
    layout: str = typer.Option(
        MODE_PARTITION,
        "--layout",
        help="partition or offset.",
        rich_help_panel="Output",
    ),
    out_dir: Path = typer.Option(
        Path("preview"),
        "--out-dir",
        "-o",
        help="Directory for the per-page HTML files.",
        rich_help_panel="Output",
    ),
) -> None:
    quiet = bool(_ctx_value(ctx, "quiet"))
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        if mode not in MODES:
            raise ValueError(f"mode must be one of: {', '.join(sorted(MODES))}")
        if layout not in ASSEMBLY_MODES:
            raise ValueError(f"layout must be one of: {', '.join(sorted(ASSEMBLY_MODES))}")
        config = _load_config(ctx)
        if template in DOC_TYPES:
            resolved_type, template_path = template, None
        else:
            resolved_type, template_path = doc_type, Path(template)
        selection = build_selection(
            data,
            law_firm=law_firm,
            insolvent_company=insolvent,
            customer=customer,
            bank_account=bank_account,
            carrier=carrier,
            vehicles=vehicles,
            discount=discount,
            salutation=salutation,
        )
        service = RenderService(config, prober_from_settings(config.measure))
        with status("Paginating template...", quiet=quiet):
            document = service.render(
                resolved_type,
                selection,
                template_path=template_path,
                mode=mode,
                allocate=False,
                assembly_mode=layout,
            )
        if document.measurement.fallback:
            _warn("layout measurement failed; everything was placed on one page", quiet=quiet)
        if document.unresolved_tokens and mode != MODE_STANDARD:
            _warn(
                "unresolved placeholders left verbatim: "
                + ", ".join(document.unresolved_tokens),
                quiet=quiet,
            )
        paths = write_html_pages(document, out_dir, stem=resolved_type)
        if quiet:
            return
        rows = [
            ("Document type", resolved_type),
            ("Preview number", document.reference_number),
            ("Pages", str(document.total_pages)),
            ("Placeholders left", str(len(document.unresolved_tokens))),
        ]
        console.print(panel("Preview", build_kv_table(rows)))
        console.print(build_outputs_tree("HTML pages", [str(path) for path in paths]))

    _run_cli(_run, debug=debug)
