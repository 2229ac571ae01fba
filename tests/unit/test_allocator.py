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

import threading
import unittest
from unittest import mock

from kanzleidoc.core.errors import SequenceConflictError
from kanzleidoc.numbering import MemoryCounterStore, SequenceAllocator


class RacingStore(MemoryCounterStore):
    """Lets another writer advance the counter before the first update lands."""

    def __init__(self, initial: dict[str, int], *, races: int) -> None:
        super().__init__(initial)
        self.races = races
        self.cas_calls = 0

    def compare_and_set(self, tenant_id: str, expected: int, new: int) -> bool:
        self.cas_calls += 1
        if self.races > 0:
            self.races -= 1
            super().compare_and_set(tenant_id, expected, new)
            return False
        return super().compare_and_set(tenant_id, expected, new)


class TestSequenceAllocator(unittest.TestCase):
    def test_first_numbers_follow_baseline(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore())
        self.assertEqual(allocator.allocate("k1"), "023976")
        self.assertEqual(allocator.allocate("k1"), "023977")
        self.assertEqual(allocator.peek("k1"), 23977)

    def test_tenants_have_separate_counters(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore())
        self.assertEqual(allocator.allocate("k1"), "023976")
        self.assertEqual(allocator.allocate("k2"), "023976")
        self.assertEqual(allocator.allocate("k1"), "023977")
        self.assertIsNone(allocator.peek("k3"))

    def test_width_pads_but_never_truncates(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore(), baseline=99, width=3)
        self.assertEqual(allocator.allocate("k1"), "100")
        allocator = SequenceAllocator(MemoryCounterStore(), baseline=999, width=3)
        self.assertEqual(allocator.allocate("k1"), "1000")

    def test_existing_counter_continues(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore({"k1": 24000}))
        self.assertEqual(allocator.allocate("k1"), "024001")

    def test_concurrent_update_is_retried(self) -> None:
        store = RacingStore({"k1": 23980}, races=1)
        allocator = SequenceAllocator(store)
        with self.assertLogs("kanzleidoc.numbering.allocator", level="DEBUG"):
            number = allocator.allocate("k1")
        self.assertEqual(number, "023982")
        self.assertEqual(store.cas_calls, 2)

    def test_create_conflict_reads_again(self) -> None:
        store = mock.Mock()
        store.get.side_effect = [None, 23976]
        store.create.return_value = False
        store.compare_and_set.return_value = True
        allocator = SequenceAllocator(store)
        self.assertEqual(allocator.allocate("k1"), "023977")
        store.create.assert_called_once_with("k1", 23976)
        store.compare_and_set.assert_called_once_with("k1", 23976, 23977)

    def test_gives_up_after_max_retries(self) -> None:
        store = mock.Mock()
        store.get.return_value = 5
        store.compare_and_set.return_value = False
        allocator = SequenceAllocator(store, max_retries=3)
        with self.assertRaises(SequenceConflictError):
            allocator.allocate("k1")
        self.assertEqual(store.compare_and_set.call_count, 3)

    def test_conflict_error_is_runtime_error(self) -> None:
        self.assertTrue(issubclass(SequenceConflictError, RuntimeError))

    def test_empty_tenant_rejected(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore())
        for tenant in ("", "   "):
            with self.subTest(tenant=tenant):
                with self.assertRaises(ValueError):
                    allocator.allocate(tenant)

    def test_tenant_is_stripped(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore())
        allocator.allocate(" k1 ")
        self.assertEqual(allocator.peek("k1"), 23976)

    def test_constructor_validation(self) -> None:
        cases = (
            {"baseline": -1},
            {"width": 0},
            {"max_retries": 0},
        )
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    SequenceAllocator(MemoryCounterStore(), **kwargs)

    def test_parallel_allocations_are_unique(self) -> None:
        allocator = SequenceAllocator(MemoryCounterStore(), max_retries=1000)
        results: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(25):
                number = allocator.allocate("k1")
                with lock:
                    results.append(number)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 200)
        self.assertEqual(len(set(results)), 200)
        self.assertEqual(sorted(results)[0], "023976")
        self.assertEqual(sorted(results)[-1], "024175")


if __name__ == "__main__":
    unittest.main()
