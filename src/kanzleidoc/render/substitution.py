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


"""Placeholder substitution for ``{{TOKEN}}`` markers in template markup."""

from __future__ import annotations

import re
import secrets
from datetime import date, timedelta
from typing import Final, Literal

from markupsafe import escape

from ..core.models import (
    BankAccount,
    Carrier,
    Customer,
    EntitySelection,
    InsolventCompany,
    LawFirm,
    Vehicle,
)
from .financials import compute_financials
from .formatting import (
    format_currency,
    format_date,
    format_iban,
    format_mileage,
    format_month_year,
    format_percent,
)

SubstitutionMode = Literal["standard", "enriched"]

MODE_STANDARD: Final = "standard"
MODE_ENRICHED: Final = "enriched"
MODES: Final[set[str]] = {MODE_STANDARD, MODE_ENRICHED}

TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Z0-9_]+)\s*\}\}")
_POSTAL_CITY_PATTERN = re.compile(r"^(\d{5})\s+(.+)$")

DELIVERY_OFFSET_DAYS: Final = 7
PREVIEW_NUMBER_PREFIX: Final = "IN-0"
SALUTATIONS: Final[dict[str, str]] = {"M": "Herr", "W": "Frau"}


def preview_reference_number() -> str:
    """Mint a throwaway ``IN-0NNNNN`` number for documents without an allocation."""
    return f"{PREVIEW_NUMBER_PREFIX}{secrets.randbelow(100_000):05d}"


def _law_firm_tokens(firm: LawFirm) -> dict[str, str]:
    return {
        "KANZLEI_NAME": firm.name,
        "KANZLEI_STRASSE": firm.street,
        "KANZLEI_PLZ": firm.postal_code,
        "KANZLEI_STADT": firm.city,
        "KANZLEI_TELEFON": firm.phone,
        "KANZLEI_FAX": firm.fax,
        "KANZLEI_EMAIL": firm.email,
        "KANZLEI_WEBSITE": firm.website,
        "KANZLEI_UST_ID": firm.vat_id,
        "KANZLEI_REGISTERGERICHT": firm.register_court,
        "KANZLEI_REGISTER_NR": firm.register_number,
        "RECHTSANWALT_NAME": firm.attorney,
    }


def _insolvent_company_tokens(company: InsolventCompany) -> dict[str, str]:
    return {
        "INSOLVENTES_UNTERNEHMEN_NAME": company.name,
        "INSOLVENTES_UNTERNEHMEN_AMTSGERICHT": company.court,
        "INSOLVENTES_UNTERNEHMEN_AKTENZEICHEN": company.case_number,
        "INSOLVENTES_UNTERNEHMEN_HANDELSREGISTER": company.commercial_register,
        "INSOLVENTES_UNTERNEHMEN_ADRESSE": company.address,
    }


def _customer_tokens(customer: Customer) -> dict[str, str]:
    return {
        "KUNDE_NAME": customer.name,
        "KUNDE_ADRESSE": customer.address,
        "KUNDE_PLZ": customer.postal_code,
        "KUNDE_STADT": customer.city,
        "KUNDE_GESCHAEFTSFUEHRER": customer.managing_director,
        "KUNDE_NUMMER": customer.customer_number,
        "KUNDE_AKTENZEICHEN": customer.case_number,
    }


def _bank_account_tokens(account: BankAccount) -> dict[str, str]:
    return {
        "BANKKONTO_NAME": account.account_name,
        "BANKKONTO_INHABER": account.account_holder,
        "BANKKONTO_IBAN": format_iban(account.iban),
        "BANKKONTO_BIC": account.bic,
        "BANKKONTO_BANK": account.bank_name,
    }


def _carrier_tokens(carrier: Carrier) -> dict[str, str]:
    return {
        "SPEDITION_NAME": carrier.name,
        "SPEDITION_STRASSE": carrier.street,
        "SPEDITION_PLZ_STADT": carrier.postal_city,
    }


def split_postal_city(value: str) -> tuple[str, str]:
    """Split ``"12345 Berlin"``; values without a 5-digit code are all city."""
    match = _POSTAL_CITY_PATTERN.match(value.strip())
    if match is None:
        return "", value.strip()
    return match.group(1), match.group(2)


def vehicle_line_values(vehicle: Vehicle) -> dict[str, str]:
    """Formatted fields of one vehicle line (one row per selected vehicle)."""
    return {
        "AUTO_MARKE": vehicle.make,
        "AUTO_MODELL": vehicle.model,
        "AUTO_FAHRGESTELL": vehicle.vin,
        "AUTO_DEKRA": vehicle.dekra_report_number,
        "AUTO_ERSTZULASSUNG": format_month_year(vehicle.first_registration),
        "AUTO_KILOMETER": format_mileage(vehicle.mileage),
        "AUTO_PREIS_NETTO": format_currency(vehicle.net_price),
    }


def render_vehicle_lines(vehicles: tuple[Vehicle, ...], *, escape_html: bool = True) -> str:
    rows: list[str] = []
    for position, vehicle in enumerate(vehicles, start=1):
        values = vehicle_line_values(vehicle)
        cells = [str(position)]
        cells.append(f"{values['AUTO_MARKE']} {values['AUTO_MODELL']}".strip())
        cells.extend(
            values[key]
            for key in ("AUTO_FAHRGESTELL", "AUTO_ERSTZULASSUNG", "AUTO_KILOMETER", "AUTO_PREIS_NETTO")
        )
        if escape_html:
            cells = [str(escape(cell)) for cell in cells]
        rows.append(
            '<tr class="auto-zeile">' + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"
        )
    return "\n".join(rows)


def _auto_tokens(today: date, reference_number: str) -> dict[str, str]:
    return {
        "AKTUELLES_DATUM": format_date(today),
        "RECHNUNGSDATUM": format_date(today),
        "LIEFERDATUM": format_date(today + timedelta(days=DELIVERY_OFFSET_DAYS)),
        "RECHNUNGSNUMMER": reference_number,
        "VERWENDUNGSZWECK": reference_number.removeprefix(PREVIEW_NUMBER_PREFIX),
    }


def _derived_tokens(selection: EntitySelection) -> dict[str, str]:
    tokens: dict[str, str] = {}
    customer = selection.customer
    if customer is not None:
        postal_city = f"{customer.postal_code} {customer.city}".strip()
        tokens["KUNDE_PLZ_STADT"] = postal_city
        tokens["LIEFERADRESSE"] = f"{customer.address}, {postal_city}"
    carrier = selection.carrier
    if carrier is not None:
        postal_code, city = split_postal_city(carrier.postal_city)
        tokens["SPEDITION_PLZ"] = postal_code
        tokens["SPEDITION_STADT"] = city
    if selection.salutation is not None:
        tokens["ANREDE"] = SALUTATIONS.get(selection.salutation, "")
    return tokens


def _financial_tokens(selection: EntitySelection) -> dict[str, str]:
    financials = compute_financials(selection.vehicles, selection.discount)
    return {
        "SUMME_NETTO": format_currency(financials.net),
        "RABATT_PROZENT": format_percent(financials.discount_percent),
        "RABATT_BETRAG": format_currency(financials.discount_amount),
        "SUMME_NETTO_RABATT": format_currency(financials.net_after_discount),
        "SUMME_MWST": format_currency(financials.tax),
        "SUMME_BRUTTO": format_currency(financials.gross),
        "SKONTO_BETRAG": format_currency(financials.cash_discount),
        "SUMME_NETTO_WORTEN": financials.net_in_words,
    }


def build_bindings(
    selection: EntitySelection,
    *,
    mode: str = MODE_ENRICHED,
    today: date | None = None,
    reference_number: str | None = None,
    escape_html: bool = True,
) -> dict[str, str]:
    """Build the token map for one document.

    Only entities present in the selection contribute their tokens, so tokens
    of missing entities survive substitution unchanged. ``standard`` mode binds
    entity fields and the auto tokens; ``enriched`` adds financial totals,
    amount in words, derived composites and the ``AUTO_ZEILEN`` rows.
    """
    if mode not in MODES:
        raise ValueError(f"unknown substitution mode: {mode}")
    today = today or date.today()
    if reference_number is None:
        reference_number = preview_reference_number()

    bindings: dict[str, str] = {}
    if selection.law_firm is not None:
        bindings.update(_law_firm_tokens(selection.law_firm))
    if selection.insolvent_company is not None:
        bindings.update(_insolvent_company_tokens(selection.insolvent_company))
    if selection.customer is not None:
        bindings.update(_customer_tokens(selection.customer))
    if selection.vehicle is not None:
        bindings.update(vehicle_line_values(selection.vehicle))
    if selection.bank_account is not None:
        bindings.update(_bank_account_tokens(selection.bank_account))
    if selection.carrier is not None:
        bindings.update(_carrier_tokens(selection.carrier))
    bindings.update(_auto_tokens(today, reference_number))

    if mode == MODE_ENRICHED:
        bindings.update(_derived_tokens(selection))
        if selection.vehicles:
            bindings.update(_financial_tokens(selection))

    if escape_html:
        bindings = {key: str(escape(value)) for key, value in bindings.items()}
    if mode == MODE_ENRICHED and selection.vehicles:
        bindings["AUTO_ZEILEN"] = render_vehicle_lines(selection.vehicles, escape_html=escape_html)
    return bindings


def resolve(text: str, bindings: dict[str, str]) -> str:
    """Replace bound tokens in one pass; unknown tokens are kept verbatim."""

    def _replace(match: re.Match[str]) -> str:
        return bindings.get(match.group(1), match.group(0))

    return TOKEN_PATTERN.sub(_replace, text)


def substitute(
    text: str,
    selection: EntitySelection,
    *,
    mode: str = MODE_ENRICHED,
    today: date | None = None,
    reference_number: str | None = None,
    escape_html: bool = True,
) -> str:
    bindings = build_bindings(
        selection,
        mode=mode,
        today=today,
        reference_number=reference_number,
        escape_html=escape_html,
    )
    return resolve(text, bindings)


def find_tokens(text: str) -> list[str]:
    """Token names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)
