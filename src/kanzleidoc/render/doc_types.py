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

from typing import Final, Literal

DocType = Literal["rechnung", "kaufvertrag", "treuhandvertrag", "frei"]

DOC_TYPE_INVOICE: Final = "rechnung"
DOC_TYPE_PURCHASE_CONTRACT: Final = "kaufvertrag"
DOC_TYPE_TRUST_AGREEMENT: Final = "treuhandvertrag"
DOC_TYPE_FREE: Final = "frei"

DOC_TYPES: Final[set[str]] = {
    DOC_TYPE_INVOICE,
    DOC_TYPE_PURCHASE_CONTRACT,
    DOC_TYPE_TRUST_AGREEMENT,
    DOC_TYPE_FREE,
}

DOC_TYPE_TITLES: Final[dict[str, str]] = {
    DOC_TYPE_INVOICE: "Rechnung",
    DOC_TYPE_PURCHASE_CONTRACT: "Kaufvertrag",
    DOC_TYPE_TRUST_AGREEMENT: "Treuhandvertrag",
    DOC_TYPE_FREE: "Dokument",
}

# Documents that stamp a freshly allocated reference number.
NUMBERED_DOC_TYPES: Final[set[str]] = {DOC_TYPE_INVOICE, DOC_TYPE_PURCHASE_CONTRACT}
