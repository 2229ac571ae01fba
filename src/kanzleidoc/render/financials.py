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

from collections.abc import Iterable
from decimal import Decimal

from ..core.errors import PreconditionError
from ..core.models import ComputedFinancials, Discount, Vehicle
from .formatting import to_cents
from .words import amount_to_words

VAT_RATE = Decimal("0.19")
CASH_DISCOUNT_RATE = Decimal("0.03")
_HUNDRED = Decimal("100")


def compute_financials(
    vehicles: Iterable[Vehicle],
    discount: Discount | None = None,
) -> ComputedFinancials:
    """Sum the vehicle prices and derive discount, tax and gross amounts.

    Gross is computed from the discounted net and tax is taken as the
    difference, so ``net_after_discount + tax == gross`` holds to the cent.
    """
    net = to_cents(sum((vehicle.net_price or Decimal("0") for vehicle in vehicles), Decimal("0")))
    percent = (discount or Discount()).effective_percent
    if not percent.is_finite():
        raise PreconditionError("discount.percent", "must be a finite number")
    if percent < 0 or percent > _HUNDRED:
        raise PreconditionError("discount.percent", "must be between 0 and 100")

    discount_amount = to_cents(net * percent / _HUNDRED)
    net_after_discount = net - discount_amount
    gross = to_cents(net_after_discount * (1 + VAT_RATE))
    tax = gross - net_after_discount
    cash_discount = to_cents(gross * (1 - CASH_DISCOUNT_RATE))
    return ComputedFinancials(
        net=net,
        discount_percent=percent,
        discount_amount=discount_amount,
        net_after_discount=net_after_discount,
        tax=tax,
        gross=gross,
        cash_discount=cash_discount,
        net_in_words=amount_to_words(net_after_discount),
    )
