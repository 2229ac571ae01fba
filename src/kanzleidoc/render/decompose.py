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


"""Split a raw HTML template into styles, body and footer markup."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from bs4.exceptions import ParserRejectedMarkup

from .types import DecomposedTemplate

logger = logging.getLogger(__name__)

FOOTER_MARKER_CLASS = "pdf-footer"
_STYLE_BLOCK = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_HEAD_ONLY_TAGS = ("head", "title", "meta", "link", "base")


def strip_style_blocks(raw: str) -> str:
    return _STYLE_BLOCK.sub("", raw)


def _has_footer_class(tag: Tag) -> bool:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return "footer" in " ".join(classes)


def find_footer(soup: BeautifulSoup) -> Tag | None:
    """Locate the footer element: marker class, then ``<footer>``, then any *footer* class."""
    marked = soup.find(class_=FOOTER_MARKER_CLASS)
    if isinstance(marked, Tag):
        return marked
    semantic = soup.find("footer")
    if isinstance(semantic, Tag):
        return semantic
    loose = soup.find(lambda tag: isinstance(tag, Tag) and _has_footer_class(tag))
    if isinstance(loose, Tag):
        return loose
    return None


def _extract_styles(soup: BeautifulSoup) -> str:
    blocks: list[str] = []
    for style in soup.find_all("style"):
        css = style.get_text().strip()
        if css:
            blocks.append(css)
        style.decompose()
    return "\n".join(blocks)


def _unwrap_document(soup: BeautifulSoup) -> None:
    for name in _HEAD_ONLY_TAGS:
        for tag in soup.find_all(name):
            tag.decompose()
    for name in ("body", "html"):
        for tag in soup.find_all(name):
            tag.unwrap()


def _iter_top_level(soup: BeautifulSoup) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_text, markup)`` for each meaningful top-level node."""
    for node in soup.contents:
        if isinstance(node, PreformattedString):
            # doctype, comments and processing instructions
            continue
        if isinstance(node, NavigableString):
            text = node.output_ready(formatter="minimal").strip()
            if text:
                yield True, text
            continue
        yield False, str(node)


def _top_level_markup(soup: BeautifulSoup) -> str:
    return "\n".join(markup for _is_text, markup in _iter_top_level(soup)).strip()


def decompose_template(raw: str) -> DecomposedTemplate:
    """Separate styles and footer from the body of a template.

    Never raises: unparsable markup degrades to the raw string with its style
    blocks removed. An empty extraction result falls back the same way.
    """
    fallback_body = strip_style_blocks(raw).strip()
    try:
        soup = BeautifulSoup(raw, "html.parser")
    except ParserRejectedMarkup as exc:
        logger.warning("Template markup rejected by parser, using raw body: %s", exc)
        return DecomposedTemplate(styles="", body=fallback_body, footer="")

    styles = _extract_styles(soup)
    footer_tag = find_footer(soup)
    footer = ""
    if footer_tag is not None:
        footer = footer_tag.decode_contents().strip()
        footer_tag.decompose()
    _unwrap_document(soup)

    body = _top_level_markup(soup)
    if not body:
        if fallback_body:
            logger.debug("Template body empty after extraction, falling back to raw markup")
        body = fallback_body
    return DecomposedTemplate(
        styles=styles,
        body=body,
        footer=footer,
        footer_found=footer_tag is not None,
    )


def split_top_level_elements(body: str) -> list[str]:
    """Serialize the body's top-level nodes as independent blocks.

    Stray top-level text is wrapped in ``<p>`` so it can be measured; comments
    and whitespace-only text are dropped.
    """
    soup = BeautifulSoup(body, "html.parser")
    return [f"<p>{markup}</p>" if is_text else markup for is_text, markup in _iter_top_level(soup)]
