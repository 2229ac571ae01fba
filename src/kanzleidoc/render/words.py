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


"""German number words for the amount-in-words line of invoices."""

from __future__ import annotations

from decimal import Decimal

from .formatting import to_cents

_ONES = ("", "eins", "zwei", "drei", "vier", "fünf", "sechs", "sieben", "acht", "neun")
_TEENS = (
    "zehn",
    "elf",
    "zwölf",
    "dreizehn",
    "vierzehn",
    "fünfzehn",
    "sechzehn",
    "siebzehn",
    "achtzehn",
    "neunzehn",
)
_TENS = ("", "", "zwanzig", "dreißig", "vierzig", "fünfzig", "sechzig", "siebzig", "achtzig", "neunzig")

# (value, singular, plural); written as separate words.
_LARGE_UNITS = (
    (1_000_000_000, "Milliarde", "Milliarden"),
    (1_000_000, "Million", "Millionen"),
)


def _compound_prefix(words: str) -> str:
    """Drop the final "s" of "eins" when a count prefixes "tausend"."""
    if words.endswith("eins"):
        return words[:-1]
    return words


def _feminine_count(words: str) -> str:
    """Inflect a trailing "eins" to "eine" before Million or Milliarde."""
    if words.endswith("eins"):
        return words[:-1] + "e"
    return words


def _below_hundred(value: int) -> str:
    if value < 10:
        return _ONES[value]
    if value < 20:
        return _TEENS[value - 10]
    tens, ones = divmod(value, 10)
    if ones == 0:
        return _TENS[tens]
    unit = "ein" if ones == 1 else _ONES[ones]
    return f"{unit}und{_TENS[tens]}"


def _below_thousand(value: int) -> str:
    hundreds, rest = divmod(value, 100)
    if hundreds == 0:
        return _below_hundred(rest)
    head = ("ein" if hundreds == 1 else _ONES[hundreds]) + "hundert"
    return head + _below_hundred(rest)


def _below_million(value: int) -> str:
    thousands, rest = divmod(value, 1000)
    if thousands == 0:
        return _below_thousand(rest)
    return _compound_prefix(_below_thousand(thousands)) + "tausend" + _below_thousand(rest)


def number_to_words(value: int) -> str:
    """Spell a non-negative integer in German (``0`` -> ``null``)."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "null"
    parts: list[str] = []
    remaining = value
    for unit, singular, plural in _LARGE_UNITS:
        count, remaining = divmod(remaining, unit)
        if count == 0:
            continue
        if count == 1:
            parts.append(f"eine {singular}")
        else:
            parts.append(f"{_feminine_count(number_to_words(count))} {plural}")
    if remaining:
        parts.append(_below_million(remaining))
    return " ".join(parts)


def amount_to_words(amount: Decimal) -> str:
    """Render ``1190.50`` as ``eintausendeinhundertneunzig Euro und 50 Cent``."""
    cents_total = int(to_cents(abs(amount)) * 100)
    euros, cents = divmod(cents_total, 100)
    return f"{number_to_words(euros)} Euro und {cents:02d} Cent"
