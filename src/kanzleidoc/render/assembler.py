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


"""Wrap planned pages into fixed-size, self-contained HTML pages."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final, Literal

from bs4 import BeautifulSoup, Tag

from .geometry import PageGeometry
from .templating import render_template, shared_template
from .types import AssembledPage, PageModel

AssemblyMode = Literal["partition", "offset"]

MODE_PARTITION: Final = "partition"
MODE_OFFSET: Final = "offset"
ASSEMBLY_MODES: Final[set[str]] = {MODE_PARTITION, MODE_OFFSET}

PAGE_TEMPLATE = shared_template("page.html.j2")
FRAME_TEMPLATE = shared_template("page_frame.html.j2")
DOCUMENT_TEMPLATE = shared_template("document.html.j2")


def page_counter(page_number: int, total_pages: int) -> str:
    return f"Seite {page_number} von {total_pages}"


def footer_label(footer_text: str, page_number: int, total_pages: int) -> str:
    """``"<footer> | Seite N von M"``, or the counter alone for an empty footer."""
    counter = page_counter(page_number, total_pages)
    text = footer_text.strip()
    if not text:
        return counter
    return f"{text} | {counter}"


def strip_outer_divs(markup: str) -> str:
    """Peel ``<div>`` wrappers that enclose the whole footer markup."""
    current = markup.strip()
    while current:
        soup = BeautifulSoup(current, "html.parser")
        nodes = [node for node in soup.contents if not (isinstance(node, str) and not node.strip())]
        if len(nodes) != 1 or not isinstance(nodes[0], Tag) or nodes[0].name != "div":
            break
        current = nodes[0].decode_contents().strip()
    return current


def assemble_page(
    page: PageModel,
    *,
    styles: str,
    geometry: PageGeometry,
    mode: str = MODE_PARTITION,
    body: str | None = None,
    title: str = "",
) -> AssembledPage:
    if mode not in ASSEMBLY_MODES:
        raise ValueError(f"unknown assembly mode: {mode}")
    if mode == MODE_OFFSET:
        if body is None:
            raise ValueError("offset assembly requires the full body")
        content = body
        offset: float | None = (page.page_number - 1) * geometry.usable_height
    else:
        content = page.partition.html
        offset = None

    footer = footer_label(strip_outer_divs(page.footer_text), page.page_number, page.total_pages)
    frame = render_template(
        FRAME_TEMPLATE,
        {
            "geometry": geometry,
            "page_number": page.page_number,
            "content": content,
            "offset": offset,
            "footer": footer,
        },
    )
    html = render_template(
        PAGE_TEMPLATE,
        {
            "geometry": geometry,
            "styles": styles,
            "title": title,
            "page_number": page.page_number,
            "total_pages": page.total_pages,
            "frame": frame,
        },
    )
    return AssembledPage(
        page_number=page.page_number,
        total_pages=page.total_pages,
        html=html,
        frame=frame,
    )


def assemble_pages(
    pages: Sequence[PageModel],
    *,
    styles: str,
    geometry: PageGeometry,
    mode: str = MODE_PARTITION,
    body: str | None = None,
    title: str = "",
) -> list[AssembledPage]:
    return [
        assemble_page(page, styles=styles, geometry=geometry, mode=mode, body=body, title=title)
        for page in pages
    ]


def combine_pages(
    pages: Sequence[AssembledPage],
    *,
    styles: str,
    geometry: PageGeometry,
    title: str = "",
) -> str:
    """One printable document holding every page frame in order."""
    return render_template(
        DOCUMENT_TEMPLATE,
        {"geometry": geometry, "styles": styles, "title": title, "pages": list(pages)},
    )
