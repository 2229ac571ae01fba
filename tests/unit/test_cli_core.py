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

import logging
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest import mock

import typer
from rich.logging import RichHandler

from kanzleidoc.cli.core import log as log_module
from kanzleidoc.cli.core.selection import (
    _parse_discount,
    _salutation_callback,
    build_selection,
)
from kanzleidoc.core.errors import PreconditionError
from tests.test_support import CATALOG_TOML


class TestSelectionHelpers(unittest.TestCase):
    def test_parse_discount(self) -> None:
        cases = (
            (None, None),
            ("10", Decimal("10")),
            ("12,5", Decimal("12.5")),
            (" 7.5 % ", Decimal("7.5")),
        )
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(_parse_discount(value), expected)
        for value in ("zehn", "nan", "NaN", "inf", "-Infinity"):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, "discount must be a number"):
                    _parse_discount(value)

    def test_salutation_callback(self) -> None:
        self.assertIsNone(_salutation_callback(None))
        self.assertEqual(_salutation_callback(" w "), "W")
        self.assertEqual(_salutation_callback("M"), "M")
        with self.assertRaises(typer.BadParameter):
            _salutation_callback("D")

    def test_build_selection_without_data(self) -> None:
        selection = build_selection(None)
        self.assertIsNone(selection.law_firm)
        self.assertEqual(selection.vehicles, ())
        with self.assertRaisesRegex(ValueError, "--data"):
            build_selection(None, customer="c1")

    def test_build_selection_from_catalog(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            data = Path(tmpdir) / "data.toml"
            data.write_text(CATALOG_TOML, encoding="utf-8")
            selection = build_selection(
                data,
                law_firm="k1",
                customer="c1",
                vehicles=["v1", "v2"],
                discount="10",
                salutation="M",
            )
            self.assertEqual(selection.customer.name, "Müller Fahrzeughandel GmbH")
            self.assertEqual(len(selection.vehicles), 2)
            self.assertEqual(selection.discount.effective_percent, Decimal("10"))
            with self.assertRaises(PreconditionError):
                build_selection(data, carrier="s9")


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(log_module.LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def test_levels(self) -> None:
        cases = (
            ({"debug": True, "quiet": False}, logging.DEBUG),
            ({"debug": True, "quiet": True}, logging.DEBUG),
            ({"debug": False, "quiet": True}, logging.ERROR),
            ({"debug": False, "quiet": False}, logging.WARNING),
        )
        for kwargs, level in cases:
            with self.subTest(**kwargs):
                logger = log_module.configure_logging(**kwargs)
                self.assertEqual(logger.level, level)
                self.assertFalse(logger.propagate)

    def test_handler_is_not_duplicated(self) -> None:
        log_module.configure_logging(debug=False, quiet=False)
        logger = log_module.configure_logging(debug=False, quiet=False)
        handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
        self.assertEqual(len(handlers), 1)

    @mock.patch("kanzleidoc.cli.core.log.console_err.print")
    def test_warn(self, print_mock: mock.MagicMock) -> None:
        log_module._warn("careful", quiet=True)
        print_mock.assert_not_called()
        log_module._warn("careful", quiet=False)
        print_mock.assert_called_once()
        self.assertIn("careful", print_mock.call_args.args[0])


if __name__ == "__main__":
    unittest.main()
