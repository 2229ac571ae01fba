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


"""Entity lookup table loaded from a TOML data file."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, TypeVar

from .errors import PreconditionError
from .models import (
    BankAccount,
    Carrier,
    Customer,
    Discount,
    EntitySelection,
    InsolventCompany,
    LawFirm,
    Salutation,
    Vehicle,
)
from .validation import missing_ids, require_dict, require_list

_R = TypeVar("_R")

_SECTIONS: dict[str, type] = {
    "law_firms": LawFirm,
    "insolvent_companies": InsolventCompany,
    "customers": Customer,
    "vehicles": Vehicle,
    "bank_accounts": BankAccount,
    "carriers": Carrier,
}


@dataclass(frozen=True)
class EntityCatalog:
    law_firms: Mapping[str, LawFirm] = field(default_factory=dict)
    insolvent_companies: Mapping[str, InsolventCompany] = field(default_factory=dict)
    customers: Mapping[str, Customer] = field(default_factory=dict)
    vehicles: Mapping[str, Vehicle] = field(default_factory=dict)
    bank_accounts: Mapping[str, BankAccount] = field(default_factory=dict)
    carriers: Mapping[str, Carrier] = field(default_factory=dict)

    def select(
        self,
        *,
        law_firm: str | None = None,
        insolvent_company: str | None = None,
        customer: str | None = None,
        bank_account: str | None = None,
        carrier: str | None = None,
        vehicles: Sequence[str] = (),
        discount_percent: Decimal | None = None,
        salutation: Salutation | None = None,
    ) -> EntitySelection:
        unknown = missing_ids(vehicles, self.vehicles)
        if unknown:
            raise PreconditionError("vehicles", f"unknown id: {', '.join(unknown)}")
        discount = (
            Discount(active=True, percent=discount_percent)
            if discount_percent is not None
            else Discount()
        )
        return EntitySelection(
            law_firm=_lookup(self.law_firms, law_firm, name="law_firm"),
            insolvent_company=_lookup(
                self.insolvent_companies, insolvent_company, name="insolvent_company"
            ),
            customer=_lookup(self.customers, customer, name="customer"),
            bank_account=_lookup(self.bank_accounts, bank_account, name="bank_account"),
            carrier=_lookup(self.carriers, carrier, name="carrier"),
            vehicles=tuple(self.vehicles[vehicle_id] for vehicle_id in vehicles),
            discount=discount,
            salutation=salutation,
        )


def load_catalog(path: str | Path) -> EntityCatalog:
    with Path(path).open("rb") as handle:
        data = tomllib.load(handle)
    return parse_catalog(data)


def parse_catalog(data: Mapping[str, Any]) -> EntityCatalog:
    sections: dict[str, dict[str, Any]] = {}
    for section, record_type in _SECTIONS.items():
        records: dict[str, Any] = {}
        for idx, raw in enumerate(require_list(data.get(section), label=section)):
            label = f"{section}[{idx}]"
            record = _build_record(record_type, require_dict(raw, label=label), label=label)
            if record.id in records:
                raise ValueError(f"{label}.id is duplicated: {record.id}")
            records[record.id] = record
        sections[section] = records
    return EntityCatalog(**sections)


def _lookup(table: Mapping[str, _R], key: str | None, *, name: str) -> _R | None:
    if key is None:
        return None
    try:
        return table[key]
    except KeyError:
        raise PreconditionError(name, f"unknown id: {key}") from None


def _build_record(record_type: type[_R], raw: dict[str, Any], *, label: str) -> _R:
    record_id = raw.get("id")
    if not isinstance(record_id, str) or not record_id.strip():
        raise ValueError(f"{label}.id must be a non-empty string")
    values: dict[str, Any] = {}
    for record_field in fields(record_type):  # type: ignore[arg-type]
        if record_field.name not in raw:
            continue
        values[record_field.name] = _coerce(record_field.name, raw[record_field.name], label=label)
    values["id"] = record_id.strip()
    return record_type(**values)


def _coerce(name: str, value: Any, *, label: str) -> Any:
    if name == "first_registration":
        return _parse_date(value, label=f"{label}.{name}")
    if name == "mileage":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{label}.{name} must be an integer")
        return value
    if name == "net_price":
        return _parse_decimal(value, label=f"{label}.{name}")
    if value is None:
        return ""
    return str(value)


def _parse_date(value: Any, *, label: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f"{label} must be an ISO date") from exc
    raise ValueError(f"{label} must be a date")


def _parse_decimal(value: Any, *, label: str) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a number")
    if isinstance(value, (int, float, str)):
        try:
            parsed = Decimal(str(value).strip().replace(",", "."))
        except InvalidOperation as exc:
            raise ValueError(f"{label} must be a number") from exc
        if not parsed.is_finite():
            raise ValueError(f"{label} must be a number")
        return parsed
    raise ValueError(f"{label} must be a number")
