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


"""Greedy, order-preserving distribution of body elements onto pages."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from .types import ContentElement, PageModel, PagePartition

logger = logging.getLogger(__name__)


def _require_usable_height(usable_height: float) -> None:
    if usable_height <= 0:
        raise ValueError("usable page height must be positive")


def partition_elements(
    elements: Sequence[ContentElement],
    usable_height: float,
) -> list[list[ContentElement]]:
    """Pack elements into runs whose heights fit ``usable_height``.

    An element that does not fit closes the current run and starts the next
    one. An element taller than a page ends up alone on its page.
    """
    _require_usable_height(usable_height)
    runs: list[list[ContentElement]] = []
    current: list[ContentElement] = []
    running = 0.0
    for element in elements:
        if current and running + element.height > usable_height:
            runs.append(current)
            current = []
            running = 0.0
        if element.height > usable_height:
            logger.debug(
                "Element %d (%.1fpx) exceeds usable height %.1fpx; placing it alone",
                element.index,
                element.height,
                usable_height,
            )
        current.append(element)
        running += element.height
    if current or not runs:
        runs.append(current)
    return runs


def plan_pages(
    elements: Sequence[ContentElement],
    usable_height: float,
    *,
    total_height: float | None = None,
    footer_text: str = "",
) -> list[PageModel]:
    """Plan the pages of a document.

    When the whole body fits (``total_height`` if measured, otherwise the sum
    of element heights) a single page holds everything. Page totals are
    stamped after all partitions exist.
    """
    _require_usable_height(usable_height)
    if total_height is None:
        total_height = sum(element.height for element in elements)

    if total_height <= usable_height:
        runs = [list(elements)]
    else:
        runs = partition_elements(elements, usable_height)

    total_pages = len(runs)
    return [
        PageModel(
            partition=PagePartition(tuple(run)),
            page_number=number,
            total_pages=total_pages,
            footer_text=footer_text,
        )
        for number, run in enumerate(runs, start=1)
    ]


def offset_page_count(total_height: float, usable_height: float) -> int:
    """Page count when the full body is shifted by one usable height per page."""
    _require_usable_height(usable_height)
    return max(1, math.ceil(total_height / usable_height))


def plan_offset_pages(
    total_height: float,
    usable_height: float,
    *,
    footer_text: str = "",
) -> list[PageModel]:
    """Empty page models for offset assembly, where each page shows a window of the full body."""
    total_pages = offset_page_count(total_height, usable_height)
    return [
        PageModel(
            partition=PagePartition(),
            page_number=number,
            total_pages=total_pages,
            footer_text=footer_text,
        )
        for number in range(1, total_pages + 1)
    ]
