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

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal

Salutation = Literal["M", "W"]


@dataclass(frozen=True)
class LawFirm:
    id: str
    name: str = ""
    street: str = ""
    postal_code: str = ""
    city: str = ""
    phone: str = ""
    fax: str = ""
    email: str = ""
    website: str = ""
    vat_id: str = ""
    register_court: str = ""
    register_number: str = ""
    attorney: str = ""


@dataclass(frozen=True)
class InsolventCompany:
    id: str
    name: str = ""
    court: str = ""
    case_number: str = ""
    commercial_register: str = ""
    address: str = ""


@dataclass(frozen=True)
class Customer:
    id: str
    name: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""
    managing_director: str = ""
    customer_number: str = ""
    case_number: str = ""


@dataclass(frozen=True)
class Vehicle:
    id: str
    make: str = ""
    model: str = ""
    vin: str = ""
    dekra_report_number: str = ""
    first_registration: date | None = None
    mileage: int | None = None
    net_price: Decimal | None = None


@dataclass(frozen=True)
class BankAccount:
    id: str
    account_name: str = ""
    account_holder: str = ""
    iban: str = ""
    bic: str = ""
    bank_name: str = ""


@dataclass(frozen=True)
class Carrier:
    id: str
    name: str = ""
    street: str = ""
    postal_city: str = ""


@dataclass(frozen=True)
class Discount:
    active: bool = False
    percent: Decimal | None = None

    @property
    def effective_percent(self) -> Decimal:
        if not self.active or self.percent is None:
            return Decimal("0")
        return self.percent


@dataclass(frozen=True)
class EntitySelection:
    """Business records chosen to populate one document."""

    law_firm: LawFirm | None = None
    insolvent_company: InsolventCompany | None = None
    customer: Customer | None = None
    bank_account: BankAccount | None = None
    carrier: Carrier | None = None
    vehicles: tuple[Vehicle, ...] = ()
    discount: Discount = field(default_factory=Discount)
    salutation: Salutation | None = None

    @property
    def vehicle(self) -> Vehicle | None:
        return self.vehicles[0] if self.vehicles else None


@dataclass(frozen=True)
class ComputedFinancials:
    net: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    net_after_discount: Decimal
    tax: Decimal
    gross: Decimal
    cash_discount: Decimal
    net_in_words: str
