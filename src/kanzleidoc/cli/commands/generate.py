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
from ...render.doc_types import NUMBERED_DOC_TYPES
from ...render.service import (
    RenderService,
    allocator_from_settings,
    prober_from_settings,
    write_html_pages,
)
from ..core.common import _ctx_value, _load_config, _run_cli
from ..core.log import _warn
from ..core.selection import _salutation_callback, build_selection
from ..ui import print_completion_panel, status

_OUTPUT_FORMATS = ("pdf", "docx", "html")

_GENERATE_HELP = (
    "Render a business document from entity records and export it.\n\n"
    "Invoices and purchase contracts receive the next reference number of the tenant.\n\n"
    "Examples:\n"
    "  kanzleidoc generate rechnung --data akten.toml --law-firm k1 --customer c1 \\\n"
    "      --bank-account b1 --insolvent i1 --vehicle v1 --tenant k1\n"
    "  kanzleidoc generate treuhandvertrag --data akten.toml ... --salutation W\n"
    "  kanzleidoc generate kaufvertrag --data akten.toml ... --format docx --template kv.docx\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_GENERATE_HELP)(generate)


def generate(
    ctx: typer.Context,
    doc_type: str = typer.Argument(..., help="rechnung, kaufvertrag, treuhandvertrag or frei."),
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
    insolvent: str | None = typer.Option(
        None,
        "--insolvent",
        help="Insolvent company id.",
        rich_help_panel="Entities",
    ),
    carrier: str | None = typer.Option(None, "--carrier", rich_help_panel="Entities"),
    vehicles: list[str] | None = typer.Option(
        None,
        "--vehicle",
        help="Vehicle id (repeat for several vehicles).",
        rich_help_panel="Entities",
    ),
    discount: str | None = typer.Option(
        None,
        "--discount",
        help="Discount percent applied before tax.",
        rich_help_panel="Entities",
    ),
    salutation: str | None = typer.Option(
        None,
        "--salutation",
        help="M or W (trust agreements).",
        callback=_salutation_callback,
        rich_help_panel="Entities",
    ),
    tenant: str | None = typer.Option(
        None,
        "--tenant",
        help="Numbering tenant (defaults to the law firm id).",
        rich_help_panel="Numbering",
    ),
    template: Path | None = typer.Option(
        None,
        "--template",
        "-t",
        help="Template file (HTML, or DOCX with --format docx).",
        rich_help_panel="Output",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (defaults to <type>-<number>.<format>).",
        rich_help_panel="Output",
    ),
    html_dir: Path | None = typer.Option(
        None,
        "--html-dir",
        help="Also write one HTML file per page to this directory.",
        rich_help_panel="Output",
    ),
    output_format: str = typer.Option(
        "pdf",
        "--format",
        "-f",
        help="pdf, docx or html.",
        rich_help_panel="Output",
    ),
    layout: str = typer.Option(
        MODE_PARTITION,
        "--layout",
        help="partition (whole elements per page) or offset (sliced body).",
        rich_help_panel="Output",
    ),
) -> None:
    quiet = bool(_ctx_value(ctx, "quiet"))
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        fmt = output_format.strip().lower()
        if fmt not in _OUTPUT_FORMATS:
            raise ValueError(f"format must be one of: {', '.join(_OUTPUT_FORMATS)}")
        if layout not in ASSEMBLY_MODES:
            raise ValueError(f"layout must be one of: {', '.join(sorted(ASSEMBLY_MODES))}")
        config = _load_config(ctx)
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
        allocator = (
            allocator_from_settings(config.numbering) if doc_type in NUMBERED_DOC_TYPES else None
        )
        service = RenderService(config, prober_from_settings(config.measure), allocator)
        tenant_id = tenant or law_firm

        if fmt == "docx":
            if template is None:
                raise ValueError("--format docx needs a --template .docx file")
            path, number = service.render_docx(
                doc_type,
                selection,
                template_path=template,
                output_path=output or Path(f"{doc_type}.docx"),
                tenant_id=tenant_id,
            )
            print_completion_panel(
                "Document ready",
                [f"Reference number: {number}", f"Saved {path}"],
                quiet=quiet,
            )
            return

        with status("Rendering document...", quiet=quiet):
            document = service.render(
                doc_type,
                selection,
                template_path=template,
                tenant_id=tenant_id,
                assembly_mode=layout,
            )
        if document.unresolved_tokens:
            _warn(
                "unresolved placeholders left verbatim: "
                + ", ".join(document.unresolved_tokens),
                quiet=quiet,
            )
        stem = f"{document.doc_type}-{document.reference_number}"
        written: list[str] = []
        if fmt == "html" or html_dir is not None:
            pages = write_html_pages(document, html_dir or output or Path("."), stem=stem)
            written.extend(f"Saved {path}" for path in pages)
        if fmt == "pdf":
            with status("Exporting PDF...", quiet=quiet):
                path = service.export_pdf(document, output or Path(f"{stem}.pdf"))
            written.append(f"Saved {path}")
        print_completion_panel(
            "Document ready",
            [
                f"Reference number: {document.reference_number}",
                f"Pages: {document.total_pages}",
                *written,
            ],
            quiet=quiet,
        )

    _run_cli(_run, debug=debug)
