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

"""Reference-number allocation and counter stores."""

from .allocator import (
    DEFAULT_BASELINE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_WIDTH,
    CounterStore,
    SequenceAllocator,
)
from .memory import MemoryCounterStore
from .sql import SequenceCounter, SqlCounterStore

__all__ = [
    "CounterStore",
    "DEFAULT_BASELINE",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_WIDTH",
    "MemoryCounterStore",
    "SequenceAllocator",
    "SequenceCounter",
    "SqlCounterStore",
]
