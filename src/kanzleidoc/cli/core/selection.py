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

from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer

from ...core.catalog import load_catalog
from ...core.models import EntitySelection


def _parse_discount(value: str | None) -> Decimal | None:
    if value is None:
        return None
    text = value.strip().rstrip("%").strip().replace(",", ".")
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"discount must be a number: {value}") from None
    if not parsed.is_finite():
        raise ValueError(f"discount must be a number: {value}")
    return parsed


def _salutation_callback(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in {"M", "W"}:
        raise typer.BadParameter("salutation must be M or W")
    return normalized


def build_selection(
    data: Path | None,
    *,
    law_firm: str | None = None,
    insolvent_company: str | None = None,
    customer: str | None = None,
    bank_account: str | None = None,
    carrier: str | None = None,
    vehicles: list[str] | None = None,
    discount: str | None = None,
    salutation: str | None = None,
) -> EntitySelection:
    if data is None:
        if any((law_firm, insolvent_company, customer, bank_account, carrier, vehicles)):
            raise ValueError("entity ids need a --data file")
        return EntitySelection()
    catalog = load_catalog(data)
    return catalog.select(
        law_firm=law_firm,
        insolvent_company=insolvent_company,
        customer=customer,
        bank_account=bank_account,
        carrier=carrier,
        vehicles=tuple(vehicles or ()),
        discount_percent=_parse_discount(discount),
        salutation=salutation,  # type: ignore[arg-type]
    )
