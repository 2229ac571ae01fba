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


"""Per-tenant reference numbers that never repeat and never go backwards."""

from __future__ import annotations

import logging
from typing import Protocol

from ..core.errors import SequenceConflictError

logger = logging.getLogger(__name__)

DEFAULT_BASELINE = 23975
DEFAULT_WIDTH = 6
DEFAULT_MAX_RETRIES = 16


class CounterStore(Protocol):
    def get(self, tenant_id: str) -> int | None: ...

    def create(self, tenant_id: str, value: int) -> bool:
        """Insert the first counter row; False when one already exists."""
        ...

    def compare_and_set(self, tenant_id: str, expected: int, new: int) -> bool:
        """Move the counter from ``expected`` to ``new``; False if it changed meanwhile."""
        ...


class SequenceAllocator:
    """Allocate the next reference number for a tenant.

    A tenant without a counter starts at ``baseline + 1``. Every later
    allocation advances the stored value with a compare-and-set, retrying
    when another writer got there first, so two callers never receive the
    same number.
    """

    def __init__(
        self,
        store: CounterStore,
        *,
        baseline: int = DEFAULT_BASELINE,
        width: int = DEFAULT_WIDTH,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if baseline < 0:
            raise ValueError("baseline must not be negative")
        if width <= 0:
            raise ValueError("width must be positive")
        if max_retries <= 0:
            raise ValueError("max_retries must be positive")
        self.store = store
        self.baseline = baseline
        self.width = width
        self.max_retries = max_retries

    def format(self, value: int) -> str:
        return str(value).zfill(self.width)

    def peek(self, tenant_id: str) -> int | None:
        return self.store.get(_require_tenant(tenant_id))

    def allocate(self, tenant_id: str) -> str:
        tenant_id = _require_tenant(tenant_id)
        for attempt in range(1, self.max_retries + 1):
            current = self.store.get(tenant_id)
            if current is None:
                candidate = self.baseline + 1
                if self.store.create(tenant_id, candidate):
                    logger.debug("Initialized counter for %s at %d", tenant_id, candidate)
                    return self.format(candidate)
            else:
                candidate = current + 1
                if self.store.compare_and_set(tenant_id, current, candidate):
                    return self.format(candidate)
            logger.debug(
                "Counter for %s changed concurrently (attempt %d/%d)",
                tenant_id,
                attempt,
                self.max_retries,
            )
        raise SequenceConflictError(
            f"could not allocate a number for {tenant_id} after {self.max_retries} attempts"
        )


def _require_tenant(tenant_id: str) -> str:
    tenant = tenant_id.strip()
    if not tenant:
        raise ValueError("tenant id must not be empty")
    return tenant
