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

import threading


class MemoryCounterStore:
    """Process-local counters, for previews and tests."""

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, tenant_id: str) -> int | None:
        with self._lock:
            return self._values.get(tenant_id)

    def create(self, tenant_id: str, value: int) -> bool:
        with self._lock:
            if tenant_id in self._values:
                return False
            self._values[tenant_id] = value
            return True

    def compare_and_set(self, tenant_id: str, expected: int, new: int) -> bool:
        with self._lock:
            if self._values.get(tenant_id) != expected:
                return False
            self._values[tenant_id] = new
            return True
