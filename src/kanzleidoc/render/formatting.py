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


"""Field formatters used when binding entity values to template tokens."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal | None) -> str:
    """Format an amount as ``1.234,56`` (no currency symbol)."""
    if value is None:
        return ""
    text = f"{to_cents(value):,.2f}"
    # swap separators: 1,234.56 -> 1.234,56
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_percent(value: Decimal | None) -> str:
    if value is None:
        return ""
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return f"{normalized:.0f}"
    return f"{normalized:f}".replace(".", ",")


def format_date(value: date | None) -> str:
    if value is None:
        return ""
    return value.strftime("%d.%m.%Y")


def format_month_year(value: date | None) -> str:
    if value is None:
        return ""
    return value.strftime("%m/%Y")


def format_mileage(value: int | None) -> str:
    if value is None:
        return ""
    return f"{value:,d}".replace(",", ".")


def format_iban(value: str | None) -> str:
    """Upper-case the IBAN and group it in blocks of four characters."""
    if not value:
        return ""
    compact = "".join(value.split()).upper()
    return " ".join(compact[idx : idx + 4] for idx in range(0, len(compact), 4))
