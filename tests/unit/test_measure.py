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

import unittest
from unittest import mock

from fpdf import FPDF
from playwright.sync_api import Error as PlaywrightError

from kanzleidoc.render import measure
from kanzleidoc.render.measure import (
    PlaywrightProber,
    TextMetricsProber,
    fallback_measurement,
    wrap_lines_to_width,
)


class TestTextMetricsProber(unittest.TestCase):
    def setUp(self) -> None:
        self.prober = TextMetricsProber(font_size_px=14, line_height=1.4, block_spacing_px=8)

    def test_single_line_height(self) -> None:
        self.assertAlmostEqual(self.prober.element_height("<p>a</p>", 714), 14 * 1.4 + 8)

    def test_line_breaks_add_lines(self) -> None:
        self.assertAlmostEqual(self.prober.element_height("<p>a<br>b</p>", 714), 2 * 14 * 1.4 + 8)

    def test_table_rows_are_lines(self) -> None:
        markup = "<table><tr><td>1</td><td>BMW</td></tr><tr><td>2</td><td>Audi</td></tr></table>"
        self.assertAlmostEqual(self.prober.element_height(markup, 714), 2 * 14 * 1.4 + 8)

    def test_empty_element_has_spacing_only(self) -> None:
        self.assertAlmostEqual(self.prober.element_height("<div></div>", 714), 8)

    def test_long_text_wraps_in_narrow_width(self) -> None:
        text = "<p>" + " ".join(["Insolvenzverwaltung"] * 40) + "</p>"
        wide = self.prober.element_height(text, 714)
        narrow = self.prober.element_height(text, 200)
        self.assertGreater(narrow, wide)

    def test_measure_sums_heights(self) -> None:
        elements = ["<h1>Rechnung</h1>", "<p>a<br>b</p>"]
        result = self.prober.measure("", elements, 714, fallback_height=983)
        self.assertFalse(result.fallback)
        self.assertEqual(len(result.element_heights), 2)
        self.assertAlmostEqual(result.total_height, sum(result.element_heights))

    def test_non_latin_text_is_measurable(self) -> None:
        height = self.prober.element_height("<p>Zahlung €  ✓ Größe</p>", 714)
        self.assertGreater(height, 8)


class TestWrapLines(unittest.TestCase):
    def test_wrap_lines_to_width(self) -> None:
        pdf = FPDF(unit="pt")
        pdf.set_font("helvetica", size=10)
        wrapped = wrap_lines_to_width(pdf, ["eins zwei drei vier fünf sechs"], 40)
        self.assertGreater(len(wrapped), 1)
        self.assertEqual(" ".join(wrapped), "eins zwei drei vier fünf sechs")

    def test_long_word_is_split(self) -> None:
        pdf = FPDF(unit="pt")
        pdf.set_font("helvetica", size=10)
        word = "Donaudampfschifffahrtsgesellschaft"
        wrapped = wrap_lines_to_width(pdf, [word], 50)
        self.assertGreater(len(wrapped), 1)
        self.assertEqual("".join(wrapped), word)


class TestPlaywrightProber(unittest.TestCase):
    def _browser(self, page: mock.MagicMock) -> mock.MagicMock:
        browser = mock.MagicMock()
        browser.new_page.return_value = page
        return browser

    def test_measure_reads_heights(self) -> None:
        page = mock.MagicMock()
        page.evaluate.side_effect = [True, {"total": 150.0, "heights": [100.0, 50.0]}]
        prober = PlaywrightProber(settle_ms=50, timeout_ms=2000)
        with mock.patch.object(measure, "get_browser", return_value=self._browser(page)) as get:
            result = prober.measure("p { margin: 0; }", ["<p>a</p>", "<p>b</p>"], 714, fallback_height=983)
        get.assert_called_once()
        self.assertEqual(result.total_height, 150.0)
        self.assertEqual(result.element_heights, (100.0, 50.0))
        self.assertFalse(result.fallback)
        html = page.set_content.call_args.args[0]
        self.assertIn("p { margin: 0; }", html)
        self.assertIn("width: 714px", html)
        self.assertEqual(page.set_content.call_args.kwargs, {"wait_until": "load", "timeout": 2000})
        self.assertEqual(page.evaluate.call_args_list[0].args[1], 50)
        page.close.assert_called_once()

    def test_render_error_falls_back_and_closes_page(self) -> None:
        page = mock.MagicMock()
        page.set_content.side_effect = PlaywrightError("Timeout 10000ms exceeded")
        prober = PlaywrightProber()
        with mock.patch.object(measure, "get_browser", return_value=self._browser(page)):
            with self.assertLogs("kanzleidoc.render.measure", level="WARNING"):
                result = prober.measure("", ["<p>a</p>", "<p>b</p>"], 714, fallback_height=983)
        self.assertTrue(result.fallback)
        self.assertEqual(result.total_height, 983.0)
        self.assertEqual(result.element_heights, (0.0, 0.0))
        page.close.assert_called_once()

    def test_browser_unavailable_falls_back(self) -> None:
        prober = PlaywrightProber()
        with mock.patch.object(measure, "get_browser", side_effect=PlaywrightError("no browser")):
            with self.assertLogs("kanzleidoc.render.measure", level="WARNING"):
                result = prober.measure("", ["<p>a</p>"], 714, fallback_height=983)
        self.assertTrue(result.fallback)

    def test_height_count_mismatch_falls_back(self) -> None:
        page = mock.MagicMock()
        page.evaluate.side_effect = [True, {"total": 100.0, "heights": [100.0]}]
        prober = PlaywrightProber()
        with mock.patch.object(measure, "get_browser", return_value=self._browser(page)):
            with self.assertLogs("kanzleidoc.render.measure", level="WARNING"):
                result = prober.measure("", ["<p>a</p>", "<p>b</p>"], 714, fallback_height=500)
        self.assertTrue(result.fallback)
        self.assertEqual(result.total_height, 500.0)

    def test_fallback_measurement(self) -> None:
        result = fallback_measurement(["a", "b", "c"], 983)
        self.assertEqual(result.total_height, 983.0)
        self.assertEqual(result.element_heights, (0.0, 0.0, 0.0))
        self.assertTrue(result.fallback)


if __name__ == "__main__":
    unittest.main()
