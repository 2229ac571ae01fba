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

import os
import re
import subprocess
import sys
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from platformdirs import user_cache_dir
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright
from rich.traceback import install as install_rich_traceback

from ..config import init_user_config, user_config_needs_init
from .core.log import configure_logging
from .ui import configure_ui, console, progress

SKIP_BROWSER_INSTALL_ENV = "KANZLEIDOC_SKIP_PLAYWRIGHT_INSTALL"
_BROWSERS_PATH_ENV = "PLAYWRIGHT_BROWSERS_PATH"
_PERCENT_RE = re.compile(r"(\d{1,3})%")
_INSTALL_LOG_TAIL = 40


def run_startup(
    *,
    quiet: bool,
    no_color: bool,
    debug: bool,
    init_config: bool,
) -> bool:
    """Prepare the console, logging, browsers and user config; True means exit early."""
    configure_ui(no_color=no_color)
    configure_logging(debug=debug, quiet=quiet)
    if debug:
        install_rich_traceback(show_locals=True)
    if init_config:
        config_dir = init_user_config()
        console.print(f"User config ready at {config_dir}")
        return True
    _ensure_playwright_browsers(quiet=quiet)
    if user_config_needs_init():
        config_dir = init_user_config()
        if not quiet:
            console.print(f"[dim]Initialized user config at {config_dir}[/dim]")
    return False


def _use_cached_browsers() -> None:
    os.environ.setdefault(_BROWSERS_PATH_ENV, user_cache_dir("ms-playwright", appauthor=False))


def _playwright_chromium_installed() -> bool:
    try:
        with sync_playwright() as driver:
            executable = Path(driver.chromium.executable_path)
    except (OSError, RuntimeError, PlaywrightError):
        return False
    return executable.exists()


def _ensure_playwright_browsers(*, quiet: bool) -> None:
    """Download Chromium on first run so layout measurement can use the browser."""
    if os.environ.get(SKIP_BROWSER_INSTALL_ENV):
        return
    _use_cached_browsers()
    if _playwright_chromium_installed():
        return
    with progress(quiet=quiet) as progress_bar:
        task_id = None
        if progress_bar is not None:
            task_id = progress_bar.add_task("Installing Chromium for layout measurement...", total=100)
        for percent in _install_chromium():
            if progress_bar is not None:
                progress_bar.update(task_id, completed=percent)


def _install_chromium() -> Iterator[int]:
    """Run ``playwright install chromium``, yielding download progress in percent."""
    command = [sys.executable, "-m", "playwright", "install", "chromium"]
    process = subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    )
    if process.stdout is None:
        raise RuntimeError("Chromium install failed: no output captured")
    recent: deque[str] = deque(maxlen=_INSTALL_LOG_TAIL)
    reached = 0
    for line in process.stdout:
        recent.append(line)
        percent = _download_percent(line)
        if percent is not None and percent > reached:
            reached = percent
            yield reached
    returncode = process.wait()
    if returncode != 0:
        detail = "".join(recent).strip() or f"exit code {returncode}"
        raise RuntimeError(f"Chromium install failed: {detail}")
    yield 100


def _download_percent(line: str) -> int | None:
    match = _PERCENT_RE.search(line)
    if match is None:
        return None
    return min(100, int(match.group(1)))
