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


"""Document generation pipeline: decompose, substitute, measure, plan, assemble."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from ..config import AppConfig, MeasureSettings, NumberingSettings
from ..core.errors import PreconditionError
from ..core.models import EntitySelection
from ..core.validation import require_doc_type, require_entities
from ..numbering import SequenceAllocator, SqlCounterStore
from .assembler import MODE_OFFSET, assemble_pages, combine_pages
from .decompose import decompose_template, split_top_level_elements
from .doc_types import DOC_TYPE_TITLES, NUMBERED_DOC_TYPES
from .docx_render import fill_docx_template
from .html_to_pdf import render_html_to_pdf
from .measure import HeightProber, PlaywrightProber, TextMetricsProber
from .planner import plan_offset_pages, plan_pages
from .substitution import (
    MODE_ENRICHED,
    build_bindings,
    find_tokens,
    resolve,
    vehicle_line_values,
)
from .types import ContentElement, RenderedDocument

logger = logging.getLogger(__name__)


def prober_from_settings(settings: MeasureSettings) -> HeightProber:
    if settings.backend == "text":
        return TextMetricsProber(font_size_px=settings.font_size_px, line_height=settings.line_height)
    return PlaywrightProber(settle_ms=settings.settle_ms, timeout_ms=settings.timeout_ms)


def allocator_from_settings(settings: NumberingSettings) -> SequenceAllocator:
    return SequenceAllocator(
        SqlCounterStore(settings.resolved_database_url),
        baseline=settings.baseline,
        width=settings.width,
        max_retries=settings.max_retries,
    )


@dataclass(frozen=True)
class RenderService:
    config: AppConfig
    prober: HeightProber
    allocator: SequenceAllocator | None = None

    def load_template(self, doc_type: str, template_path: str | Path | None = None) -> str:
        path = Path(template_path) if template_path else self.config.template_path(doc_type)
        if not path.is_file():
            raise FileNotFoundError(f"template not found: {path}")
        return path.read_text(encoding="utf-8")

    def reference_number_for(
        self,
        doc_type: str,
        *,
        tenant_id: str | None,
        allocate: bool,
    ) -> str | None:
        """Allocate a number for numbered document types; None means a preview number."""
        if not allocate or doc_type not in NUMBERED_DOC_TYPES:
            return None
        if self.allocator is None:
            raise RuntimeError("no sequence allocator configured")
        if not tenant_id or not tenant_id.strip():
            raise PreconditionError("tenant", "required to allocate a reference number")
        return self.allocator.allocate(tenant_id)

    def render(
        self,
        doc_type: str,
        selection: EntitySelection,
        *,
        template: str | None = None,
        template_path: str | Path | None = None,
        mode: str = MODE_ENRICHED,
        tenant_id: str | None = None,
        allocate: bool = True,
        today: date | None = None,
        assembly_mode: str = "partition",
    ) -> RenderedDocument:
        doc_type = require_doc_type(doc_type)
        require_entities(selection, doc_type)
        raw = template if template is not None else self.load_template(doc_type, template_path)
        reference_number = self.reference_number_for(doc_type, tenant_id=tenant_id, allocate=allocate)

        bindings = build_bindings(
            selection,
            mode=mode,
            today=today or date.today(),
            reference_number=reference_number,
        )
        decomposed = decompose_template(raw)
        body = resolve(decomposed.body, bindings)
        footer_source = decomposed.footer if decomposed.footer.strip() else self.config.footer_text
        footer = resolve(footer_source, bindings)

        geometry = self.config.geometry
        usable_height = geometry.usable_height
        markup = split_top_level_elements(body)
        measurement = self.prober.measure(
            decomposed.styles,
            markup,
            geometry.content_width,
            fallback_height=usable_height,
        )
        if measurement.fallback:
            logger.warning("Layout measurement unavailable; rendering %s as one page", doc_type)

        number = bindings["RECHNUNGSNUMMER"]
        title = f"{DOC_TYPE_TITLES[doc_type]} {number}".strip()
        if assembly_mode == MODE_OFFSET:
            pages = plan_offset_pages(measurement.total_height, usable_height, footer_text=footer)
        else:
            elements = [
                ContentElement(index=index, html=html, height=height)
                for index, (html, height) in enumerate(zip(markup, measurement.element_heights))
            ]
            pages = plan_pages(
                elements,
                usable_height,
                total_height=measurement.total_height,
                footer_text=footer,
            )
        assembled = assemble_pages(
            pages,
            styles=decomposed.styles,
            geometry=geometry,
            mode=assembly_mode,
            body=body,
            title=title,
        )
        logger.debug("Rendered %s %s on %d page(s)", doc_type, number, len(assembled))
        return RenderedDocument(
            doc_type=doc_type,
            reference_number=number,
            pages=tuple(assembled),
            styles=decomposed.styles,
            measurement=measurement,
            unresolved_tokens=tuple(find_tokens(body + footer)),
        )

    def export_pdf(self, document: RenderedDocument, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        html = combine_pages(
            document.pages,
            styles=document.styles,
            geometry=self.config.geometry,
            title=f"{DOC_TYPE_TITLES[document.doc_type]} {document.reference_number or ''}".strip(),
        )
        render_html_to_pdf(html, output_path, timeout_ms=self.config.measure.timeout_ms)
        return output_path

    def render_docx(
        self,
        doc_type: str,
        selection: EntitySelection,
        *,
        template_path: str | Path,
        output_path: str | Path,
        tenant_id: str | None = None,
        allocate: bool = True,
        today: date | None = None,
    ) -> tuple[Path, str]:
        """Fill a Word template; returns the written path and the reference number."""
        doc_type = require_doc_type(doc_type)
        require_entities(selection, doc_type)
        reference_number = self.reference_number_for(doc_type, tenant_id=tenant_id, allocate=allocate)
        bindings = build_bindings(
            selection,
            mode=MODE_ENRICHED,
            today=today or date.today(),
            reference_number=reference_number,
            escape_html=False,
        )
        bindings.pop("AUTO_ZEILEN", None)
        lines = [vehicle_line_values(vehicle) for vehicle in selection.vehicles]
        path = fill_docx_template(template_path, output_path, bindings, vehicle_lines=lines)
        return path, bindings["RECHNUNGSNUMMER"]


def write_html_pages(document: RenderedDocument, out_dir: str | Path, *, stem: str) -> list[Path]:
    """Write one standalone HTML file per page (``<stem>-001.html``...)."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []
    for page in document.pages:
        path = out_dir / f"{stem}-{page.page_number:03d}.html"
        path.write_text(page.html, encoding="utf-8")
        paths.append(path)
    return paths
