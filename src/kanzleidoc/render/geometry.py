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

from dataclasses import dataclass

# CSS pixels at 96 dpi.
A4_WIDTH_PX = 794
A4_HEIGHT_PX = 1123
LETTER_WIDTH_PX = 816
LETTER_HEIGHT_PX = 1056
DEFAULT_MARGIN_PX = 40
DEFAULT_FOOTER_HEIGHT_PX = 60


@dataclass(frozen=True)
class PageGeometry:
    width_px: float = A4_WIDTH_PX
    height_px: float = A4_HEIGHT_PX
    margin_px: float = DEFAULT_MARGIN_PX
    footer_height_px: float = DEFAULT_FOOTER_HEIGHT_PX

    @property
    def content_width(self) -> float:
        return self.width_px - 2 * self.margin_px

    @property
    def usable_height(self) -> float:
        return self.height_px - 2 * self.margin_px - self.footer_height_px


PAPER_GEOMETRY: dict[str, PageGeometry] = {
    "A4": PageGeometry(A4_WIDTH_PX, A4_HEIGHT_PX),
    "LETTER": PageGeometry(LETTER_WIDTH_PX, LETTER_HEIGHT_PX),
}


def geometry_for_paper(paper: str) -> PageGeometry:
    key = paper.strip().upper()
    if key not in PAPER_GEOMETRY:
        choices = ", ".join(sorted(PAPER_GEOMETRY))
        raise ValueError(f"unsupported paper size: {paper} (expected one of {choices})")
    return PAPER_GEOMETRY[key]
