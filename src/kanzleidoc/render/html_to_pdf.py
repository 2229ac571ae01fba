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

import atexit
from pathlib import Path

from playwright.sync_api import Browser, Playwright, sync_playwright

_PLAYWRIGHT: Playwright | None = None
_BROWSER: Browser | None = None
_SHUTDOWN_REGISTERED = False


def _shutdown_playwright() -> None:
    global _BROWSER, _PLAYWRIGHT
    browser = _BROWSER
    playwright = _PLAYWRIGHT
    _BROWSER = None
    _PLAYWRIGHT = None
    if browser is not None:
        browser.close()
    if playwright is not None:
        playwright.stop()


def get_browser() -> Browser:
    """Return the shared headless Chromium, starting it on first use."""
    global _BROWSER, _PLAYWRIGHT, _SHUTDOWN_REGISTERED
    if _BROWSER is not None:
        return _BROWSER
    if not _SHUTDOWN_REGISTERED:
        atexit.register(_shutdown_playwright)
        _SHUTDOWN_REGISTERED = True
    if _PLAYWRIGHT is None:
        _PLAYWRIGHT = sync_playwright().start()
    try:
        _BROWSER = _PLAYWRIGHT.chromium.launch()
    except Exception:
        _shutdown_playwright()
        raise
    return _BROWSER


def render_html_to_pdf(
    html: str,
    output_path: str | Path,
    *,
    timeout_ms: float | None = None,
) -> None:
    """Print a paged HTML document to PDF using its CSS ``@page`` size."""
    output_path = Path(output_path)
    browser = get_browser()
    page = browser.new_page()
    try:
        page.set_content(html, wait_until="load", timeout=timeout_ms)
        page.emulate_media(media="print")
        page.pdf(
            path=str(output_path),
            print_background=True,
            prefer_css_page_size=True,
            margin={"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"},
        )
    finally:
        page.close()
