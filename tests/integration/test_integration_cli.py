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

import re
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from kanzleidoc.cli import app
from tests.test_support import CATALOG_TOML, temp_env, with_playwright_skip, write_text_config

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")

ENTITY_ARGS = [
    "--law-firm",
    "k1",
    "--customer",
    "c1",
    "--bank-account",
    "b1",
    "--insolvent",
    "i1",
]


def _strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


class TestIntegrationCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config = write_text_config(
            self.root / "kanzlei.toml",
            database_url=f"sqlite:///{self.root / 'db' / 'counters.sqlite3'}",
        )
        self.data = self.root / "akten.toml"
        self.data.write_text(CATALOG_TOML, encoding="utf-8")
        self.runner = CliRunner()
        self._env = temp_env({"XDG_CONFIG_HOME": str(self.root / "xdg")})
        self._env.__enter__()
        self._skip = with_playwright_skip()
        self._skip.__enter__()

    def tearDown(self) -> None:
        self._skip.__exit__(None, None, None)
        self._env.__exit__(None, None, None)
        self._tmp.cleanup()

    def _invoke(self, *args: str):
        return self.runner.invoke(app, ["--config", str(self.config), *args])

    def _number(self) -> str:
        result = self._invoke("--quiet", "number", "show", "--tenant", "k1")
        self.assertEqual(result.exit_code, 0, result.output)
        return _strip_ansi(result.output).strip().splitlines()[-1]

    def test_generate_html_allocates_sequential_numbers(self) -> None:
        out = self.root / "out"
        args = [
            "generate",
            "rechnung",
            "--data",
            str(self.data),
            *ENTITY_ARGS,
            "--vehicle",
            "v1",
            "--vehicle",
            "v2",
            "--format",
            "html",
            "--output",
            str(out),
        ]
        first = self._invoke(*args)
        self.assertEqual(first.exit_code, 0, first.output)
        second = self._invoke(*args)
        self.assertEqual(second.exit_code, 0, second.output)

        page = out / "rechnung-023976-001.html"
        self.assertTrue(page.is_file())
        self.assertTrue((out / "rechnung-023977-001.html").is_file())
        html = page.read_text(encoding="utf-8")
        self.assertIn("Audi A4", html)
        self.assertIn("3.500,50", html)
        self.assertNotIn("{{", html)
        self.assertEqual(self._number(), "023977")

    def test_number_next_and_show(self) -> None:
        self.assertEqual(self._number(), "none")
        result = self._invoke("number", "next", "--tenant", "k1")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("023976", _strip_ansi(result.output))
        self.assertEqual(self._number(), "023976")

    def test_missing_entity_does_not_consume_a_number(self) -> None:
        result = self._invoke(
            "generate",
            "kaufvertrag",
            "--data",
            str(self.data),
            *ENTITY_ARGS,
            "--vehicle",
            "v1",
            "--format",
            "html",
            "--output",
            str(self.root / "out"),
        )
        self.assertEqual(result.exit_code, 2)
        self.assertIn("carrier", _strip_ansi(result.output))
        self.assertEqual(self._number(), "none")

    def test_unknown_entity_id_fails(self) -> None:
        result = self._invoke(
            "generate", "rechnung", "--data", str(self.data), "--customer", "c9", "--format", "html"
        )
        self.assertEqual(result.exit_code, 2)
        self.assertIn("c9", _strip_ansi(result.output))

    def test_preview_doc_type_enriched(self) -> None:
        out = self.root / "preview"
        result = self._invoke(
            "preview",
            "treuhandvertrag",
            "--data",
            str(self.data),
            *ENTITY_ARGS,
            "--vehicle",
            "v1",
            "--salutation",
            "W",
            "--mode",
            "enriched",
            "--out-dir",
            str(out),
        )
        self.assertEqual(result.exit_code, 0, result.output)
        html = (out / "treuhandvertrag-001.html").read_text(encoding="utf-8")
        self.assertIn("Frau", html)
        self.assertNotIn("{{", html)
        self.assertEqual(self._number(), "none")

    def test_preview_template_file(self) -> None:
        template = self.root / "entwurf.html"
        template.write_text(
            "<html><body><h1>Entwurf {{RECHNUNGSNUMMER}}</h1><p>{{KUNDE_NAME}}</p>"
            "<p>{{SUMME_NETTO}}</p></body></html>",
            encoding="utf-8",
        )
        out = self.root / "preview"
        result = self._invoke(
            "preview", str(template), "--data", str(self.data), "--customer", "c1", "--out-dir", str(out)
        )
        self.assertEqual(result.exit_code, 0, result.output)
        html = (out / "frei-001.html").read_text(encoding="utf-8")
        self.assertIn("Entwurf IN-0", html)
        self.assertIn("Müller Fahrzeughandel GmbH", html)
        self.assertIn("{{SUMME_NETTO}}", html)

    def test_config_print_path(self) -> None:
        result = self.runner.invoke(app, ["--paper", "LETTER", "config", "--print-path"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("letter.toml", _strip_ansi(result.output))


if __name__ == "__main__":
    unittest.main()
