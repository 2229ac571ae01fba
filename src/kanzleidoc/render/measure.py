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


"""Measure rendered heights of body elements at a fixed page width."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from bs4 import BeautifulSoup
from fpdf import FPDF
from playwright.sync_api import Error as PlaywrightError

from .html_to_pdf import get_browser
from .templating import render_template, shared_template
from .types import Measurement

logger = logging.getLogger(__name__)

MEASURE_TEMPLATE = shared_template("measure.html.j2")
MEASURE_ROOT_ID = "kd-measure"
DEFAULT_SETTLE_MS = 500
DEFAULT_TIMEOUT_MS = 10_000
PX_TO_PT = 0.75

_MEASURE_SCRIPT = """
(rootId) => {
  const root = document.getElementById(rootId);
  const heights = Array.from(root.children).map((el) => {
    const style = window.getComputedStyle(el);
    const margins = parseFloat(style.marginTop) + parseFloat(style.marginBottom);
    return el.getBoundingClientRect().height + (isNaN(margins) ? 0 : margins);
  });
  return { total: root.scrollHeight, heights };
}
"""

_SETTLE_SCRIPT = """
(ms) => Promise.race([
  document.fonts.ready,
  new Promise((resolve) => setTimeout(resolve, ms)),
]).then(() => true)
"""

_BLOCK_TAGS = [
    "p",
    "div",
    "section",
    "article",
    "header",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "pre",
    "table",
    "ul",
    "ol",
    "hr",
]


class HeightProber(Protocol):
    def measure(
        self,
        styles: str,
        elements: Sequence[str],
        width: float,
        *,
        fallback_height: float,
    ) -> Measurement: ...


def fallback_measurement(elements: Sequence[str], fallback_height: float) -> Measurement:
    """One page's worth of height with unknown per-element sizes."""
    return Measurement(
        total_height=float(fallback_height),
        element_heights=tuple(0.0 for _ in elements),
        fallback=True,
    )


class PlaywrightProber:
    """Lay the body out in headless Chromium and read element heights."""

    def __init__(
        self,
        *,
        settle_ms: int = DEFAULT_SETTLE_MS,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.settle_ms = settle_ms
        self.timeout_ms = timeout_ms

    def measure(
        self,
        styles: str,
        elements: Sequence[str],
        width: float,
        *,
        fallback_height: float,
    ) -> Measurement:
        html = render_template(
            MEASURE_TEMPLATE,
            {"styles": styles, "elements": list(elements), "width": width, "root_id": MEASURE_ROOT_ID},
        )
        try:
            browser = get_browser()
            page = browser.new_page(viewport={"width": max(1, int(round(width))), "height": 800})
        except PlaywrightError as exc:
            logger.warning("Measurement browser unavailable, using one-page fallback: %s", exc)
            return fallback_measurement(elements, fallback_height)
        try:
            page.set_content(html, wait_until="load", timeout=self.timeout_ms)
            page.evaluate(_SETTLE_SCRIPT, self.settle_ms)
            result = page.evaluate(_MEASURE_SCRIPT, MEASURE_ROOT_ID)
        except PlaywrightError as exc:
            logger.warning("Measurement failed, using one-page fallback: %s", exc)
            return fallback_measurement(elements, fallback_height)
        finally:
            page.close()

        heights = tuple(float(value) for value in result.get("heights", ()))
        if len(heights) != len(elements):
            logger.warning(
                "Measured %d blocks for %d elements, using one-page fallback",
                len(heights),
                len(elements),
            )
            return fallback_measurement(elements, fallback_height)
        return Measurement(total_height=float(result.get("total", sum(heights))), element_heights=heights)


def wrap_lines_to_width(pdf: FPDF, lines: Sequence[str], max_width: float) -> list[str]:
    wrapped: list[str] = []
    for line in lines:
        words = line.split()
        current = ""
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if pdf.get_string_width(candidate) <= max_width:
                current = candidate
                continue
            if current:
                wrapped.append(current)
                current = ""
            if pdf.get_string_width(word) <= max_width:
                current = word
                continue
            chunk = ""
            for ch in word:
                next_chunk = f"{chunk}{ch}"
                if chunk and pdf.get_string_width(next_chunk) > max_width:
                    wrapped.append(chunk)
                    chunk = ch
                else:
                    chunk = next_chunk
            current = chunk
        if current:
            wrapped.append(current)
    return wrapped


def _text_lines(markup: str) -> list[str]:
    soup = BeautifulSoup(markup, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for row in soup.find_all("tr"):
        cells = [cell.get_text(" ", strip=True) for cell in row.find_all(["td", "th"])]
        row.replace_with("\n" + "  ".join(cells) + "\n")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    text = soup.get_text()
    # core fonts only cover latin-1
    text = text.encode("latin-1", "replace").decode("latin-1")
    return [line.strip() for line in text.split("\n") if line.strip()]


class TextMetricsProber:
    """Deterministic height estimate from font metrics, no browser needed."""

    def __init__(
        self,
        *,
        font_size_px: float = 14.0,
        line_height: float = 1.4,
        block_spacing_px: float = 8.0,
        font_family: str = "helvetica",
    ) -> None:
        self.font_size_px = font_size_px
        self.line_height = line_height
        self.block_spacing_px = block_spacing_px
        self._pdf = FPDF(unit="pt")
        self._pdf.set_font(font_family, size=font_size_px * PX_TO_PT)

    def element_height(self, markup: str, width: float) -> float:
        lines = wrap_lines_to_width(self._pdf, _text_lines(markup), width * PX_TO_PT)
        return len(lines) * self.font_size_px * self.line_height + self.block_spacing_px

    def measure(
        self,
        styles: str,
        elements: Sequence[str],
        width: float,
        *,
        fallback_height: float,
    ) -> Measurement:
        heights = tuple(self.element_height(markup, width) for markup in elements)
        return Measurement(total_height=sum(heights), element_heights=heights)
