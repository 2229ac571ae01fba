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


"""Fill ``{{TOKEN}}`` placeholders in Word templates."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from copy import deepcopy
from pathlib import Path

from docx import Document as open_docx_document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from .substitution import TOKEN_PATTERN, resolve

VEHICLE_LINE_PREFIX = "AUTO_"


def fill_docx_template(
    template_path: str | Path,
    output_path: str | Path,
    bindings: Mapping[str, str],
    *,
    vehicle_lines: Sequence[Mapping[str, str]] = (),
) -> Path:
    """Write a copy of the template with every bound token replaced.

    A table row referring to ``AUTO_*`` tokens is repeated once per entry of
    ``vehicle_lines``; each copy is filled from its own line values.
    """
    template_path = Path(template_path)
    if not template_path.is_file():
        raise FileNotFoundError(f"DOCX template not found: {template_path}")
    output_path = Path(output_path)

    doc = open_docx_document(str(template_path))
    if vehicle_lines:
        for table in _iter_tables(doc.tables):
            _expand_vehicle_rows(table, bindings, vehicle_lines)
    for paragraph in _iter_document_paragraphs(doc):
        _fill_paragraph(paragraph, bindings)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(output_path))
    return output_path


def _iter_tables(tables: Iterable[Table]) -> Iterator[Table]:
    for table in tables:
        yield table
        for row in table.rows:
            for cell in row.cells:
                yield from _iter_tables(cell.tables)


def _iter_table_paragraphs(tables: Iterable[Table]) -> Iterator[Paragraph]:
    for table in _iter_tables(tables):
        for row in table.rows:
            for cell in row.cells:
                yield from cell.paragraphs


def _iter_document_paragraphs(doc: object) -> Iterator[Paragraph]:
    yield from getattr(doc, "paragraphs", [])
    yield from _iter_table_paragraphs(getattr(doc, "tables", []))
    for section in getattr(doc, "sections", []):
        for part in (section.header, section.footer):
            yield from part.paragraphs
            yield from _iter_table_paragraphs(part.tables)


def _row_tokens(row: object) -> set[str]:
    tokens: set[str] = set()
    for cell in getattr(row, "cells", []):
        tokens.update(TOKEN_PATTERN.findall(cell.text))
    return tokens


def _expand_vehicle_rows(
    table: Table,
    bindings: Mapping[str, str],
    vehicle_lines: Sequence[Mapping[str, str]],
) -> None:
    for row in list(table.rows):
        if not any(token.startswith(VEHICLE_LINE_PREFIX) for token in _row_tokens(row)):
            continue
        template_tr = row._tr
        anchor = template_tr
        for position, line in enumerate(vehicle_lines, start=1):
            new_tr = deepcopy(template_tr)
            anchor.addnext(new_tr)
            anchor = new_tr
            line_bindings = {**bindings, **line, "AUTO_POSITION": str(position)}
            for p_element in new_tr.iter(qn("w:p")):
                _fill_paragraph(Paragraph(p_element, table), line_bindings)
        template_tr.getparent().remove(template_tr)


def _fill_paragraph(paragraph: Paragraph, bindings: Mapping[str, str]) -> None:
    text = paragraph.text
    if "{{" not in text:
        return
    resolved = resolve(text, dict(bindings))
    if resolved == text:
        return
    runs = paragraph.runs
    if not runs:
        return
    # tokens may span runs; keep the first run's formatting
    runs[0].text = resolved
    for run in runs[1:]:
        run.text = ""
