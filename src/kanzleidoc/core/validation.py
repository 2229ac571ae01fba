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
from typing import Any

from ..render.doc_types import (
    DOC_TYPE_FREE,
    DOC_TYPE_INVOICE,
    DOC_TYPE_PURCHASE_CONTRACT,
    DOC_TYPE_TRUST_AGREEMENT,
    DOC_TYPES,
)
from .errors import PreconditionError
from .models import EntitySelection

_BASE_ENTITIES = ("law_firm", "customer", "bank_account", "insolvent_company")

REQUIRED_ENTITIES: dict[str, tuple[str, ...]] = {
    DOC_TYPE_INVOICE: (*_BASE_ENTITIES, "vehicles"),
    DOC_TYPE_PURCHASE_CONTRACT: (*_BASE_ENTITIES, "carrier", "vehicles"),
    DOC_TYPE_TRUST_AGREEMENT: (*_BASE_ENTITIES, "salutation"),
    DOC_TYPE_FREE: (),
}


def require_dict(value: object, *, label: str) -> dict[str, Any]:
    """Validate that value is a dict."""
    if not isinstance(value, dict):
        raise ValueError(f"{label} must be a table")
    return value


def require_list(value: object, *, label: str) -> list[Any]:
    """Validate that value is a list (missing means empty)."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{label} must be an array of tables")
    return value


def require_doc_type(doc_type: str) -> str:
    normalized = doc_type.strip().lower()
    if normalized not in DOC_TYPES:
        choices = ", ".join(sorted(DOC_TYPES))
        raise ValueError(f"unknown document type: {doc_type} (expected one of {choices})")
    return normalized


def require_entities(selection: EntitySelection, doc_type: str) -> None:
    """Fail before pagination when the selection lacks a required record."""
    for name in REQUIRED_ENTITIES[require_doc_type(doc_type)]:
        if name == "vehicles":
            if not selection.vehicles:
                raise PreconditionError("vehicles", "at least one vehicle is required")
            continue
        if name == "salutation":
            if selection.salutation not in ("M", "W"):
                raise PreconditionError("salutation", "must be 'M' or 'W'")
            continue
        if getattr(selection, name) is None:
            raise PreconditionError(name, "required for this document type")
    validate_discount(selection)


def validate_discount(selection: EntitySelection) -> None:
    discount = selection.discount
    if not discount.active:
        return
    if discount.percent is None:
        raise PreconditionError("discount.percent", "required when the discount is active")
    if not discount.percent.is_finite():
        raise PreconditionError("discount.percent", "must be a finite number")
    if discount.percent < Decimal("0") or discount.percent > Decimal("100"):
        raise PreconditionError("discount.percent", "must be between 0 and 100")


def missing_ids(wanted: Iterable[str], known: Iterable[str]) -> list[str]:
    known_set = set(known)
    return [value for value in wanted if value not in known_set]
