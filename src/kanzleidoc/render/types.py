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

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DecomposedTemplate:
    styles: str
    body: str
    footer: str
    footer_found: bool = False


@dataclass(frozen=True)
class ContentElement:
    """One top-level block of the body; never split across pages."""

    index: int
    html: str
    height: float = 0.0


@dataclass(frozen=True)
class Measurement:
    total_height: float
    element_heights: tuple[float, ...] = ()
    fallback: bool = False


@dataclass(frozen=True)
class FooterPayload:
    footer_text: str
    page_number: int
    total_pages: int


@dataclass(frozen=True)
class PagePartition:
    elements: tuple[ContentElement, ...] = ()

    @property
    def height(self) -> float:
        return sum(element.height for element in self.elements)

    @property
    def html(self) -> str:
        return "\n".join(element.html for element in self.elements)


@dataclass(frozen=True)
class PageModel:
    partition: PagePartition
    page_number: int
    total_pages: int
    footer_text: str = ""

    @property
    def footer(self) -> FooterPayload:
        return FooterPayload(self.footer_text, self.page_number, self.total_pages)


@dataclass(frozen=True)
class AssembledPage:
    page_number: int
    total_pages: int
    html: str
    frame: str = ""


@dataclass(frozen=True)
class RenderedDocument:
    doc_type: str
    reference_number: str | None
    pages: tuple[AssembledPage, ...]
    styles: str = ""
    measurement: Measurement | None = None
    unresolved_tokens: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_pages(self) -> int:
        return len(self.pages)
