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

import os
import tempfile
import unittest
from contextlib import ExitStack, nullcontext
from pathlib import Path
from unittest import mock

from kanzleidoc.cli import startup


def _fake_install(lines: list[str], returncode: int = 0) -> mock.Mock:
    process = mock.Mock()
    process.stdout = iter(lines)
    process.wait.return_value = returncode
    return process


class TestRunStartup(unittest.TestCase):
    def _run(self, *, init_config: bool, needs_init: bool, quiet: bool, debug: bool = False):
        with ExitStack() as stack:
            mocks = {
                name: stack.enter_context(mock.patch.object(startup, name, **kwargs))
                for name, kwargs in (
                    ("configure_ui", {}),
                    ("configure_logging", {}),
                    ("install_rich_traceback", {}),
                    ("_ensure_playwright_browsers", {}),
                    ("init_user_config", {"return_value": "/tmp/kanzleidoc"}),
                    ("user_config_needs_init", {"return_value": needs_init}),
                )
            }
            mocks["print"] = stack.enter_context(mock.patch.object(startup.console, "print"))
            result = startup.run_startup(
                quiet=quiet, no_color=True, debug=debug, init_config=init_config
            )
        return result, mocks

    def test_init_config_exits_before_browser_check(self) -> None:
        result, mocks = self._run(init_config=True, needs_init=False, quiet=False)
        self.assertTrue(result)
        mocks["_ensure_playwright_browsers"].assert_not_called()
        mocks["user_config_needs_init"].assert_not_called()
        self.assertIn("User config ready", mocks["print"].call_args.args[0])

    def test_first_run_initializes_config(self) -> None:
        cases = (
            (True, True, 1, 0),
            (True, False, 1, 1),
            (False, False, 0, 0),
        )
        for needs_init, quiet, init_calls, print_calls in cases:
            with self.subTest(needs_init=needs_init, quiet=quiet):
                result, mocks = self._run(init_config=False, needs_init=needs_init, quiet=quiet)
                self.assertFalse(result)
                mocks["_ensure_playwright_browsers"].assert_called_once_with(quiet=quiet)
                mocks["configure_logging"].assert_called_once_with(debug=False, quiet=quiet)
                self.assertEqual(mocks["init_user_config"].call_count, init_calls)
                self.assertEqual(mocks["print"].call_count, print_calls)

    def test_debug_installs_rich_tracebacks(self) -> None:
        _result, mocks = self._run(init_config=False, needs_init=False, quiet=True, debug=True)
        mocks["install_rich_traceback"].assert_called_once_with(show_locals=True)


class TestBrowserCheck(unittest.TestCase):
    def test_browsers_path_defaults_to_user_cache(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("PLAYWRIGHT_BROWSERS_PATH", None)
            with mock.patch.object(startup, "user_cache_dir", return_value="/cache/ms-playwright"):
                startup._use_cached_browsers()
            self.assertEqual(os.environ["PLAYWRIGHT_BROWSERS_PATH"], "/cache/ms-playwright")

        with mock.patch.dict(os.environ, {"PLAYWRIGHT_BROWSERS_PATH": "/opt/browsers"}):
            startup._use_cached_browsers()
            self.assertEqual(os.environ["PLAYWRIGHT_BROWSERS_PATH"], "/opt/browsers")

    def test_chromium_installed_checks_executable(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            executable = Path(tmpdir) / "chrome"
            driver = mock.MagicMock()
            driver.__enter__.return_value.chromium.executable_path = str(executable)
            with mock.patch.object(startup, "sync_playwright", return_value=driver):
                self.assertFalse(startup._playwright_chromium_installed())
                executable.write_text("", encoding="utf-8")
                self.assertTrue(startup._playwright_chromium_installed())

        with mock.patch.object(startup, "sync_playwright", side_effect=OSError("no driver")):
            self.assertFalse(startup._playwright_chromium_installed())

    def test_skip_env_and_installed_browser_do_nothing(self) -> None:
        with mock.patch.dict(os.environ, {startup.SKIP_BROWSER_INSTALL_ENV: "1"}):
            with mock.patch.object(startup, "_install_chromium") as install:
                startup._ensure_playwright_browsers(quiet=True)
        install.assert_not_called()

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(startup.SKIP_BROWSER_INSTALL_ENV, None)
            with mock.patch.object(startup, "_use_cached_browsers"):
                with mock.patch.object(startup, "_playwright_chromium_installed", return_value=True):
                    with mock.patch.object(startup, "_install_chromium") as install:
                        startup._ensure_playwright_browsers(quiet=True)
        install.assert_not_called()

    def test_missing_browser_is_installed_with_progress(self) -> None:
        progress_bar = mock.Mock()
        progress_bar.add_task.return_value = 3
        cases = ((True, None), (False, progress_bar))
        for quiet, bar in cases:
            with self.subTest(quiet=quiet):
                with mock.patch.dict(os.environ, {}, clear=False):
                    os.environ.pop(startup.SKIP_BROWSER_INSTALL_ENV, None)
                    with mock.patch.object(startup, "_use_cached_browsers"):
                        with mock.patch.object(
                            startup, "_playwright_chromium_installed", return_value=False
                        ):
                            with mock.patch.object(
                                startup, "progress", return_value=nullcontext(bar)
                            ):
                                with mock.patch.object(
                                    startup, "_install_chromium", return_value=iter([40, 100])
                                ) as install:
                                    startup._ensure_playwright_browsers(quiet=quiet)
                install.assert_called_once_with()
        progress_bar.update.assert_has_calls([mock.call(3, completed=40), mock.call(3, completed=100)])


class TestInstallChromium(unittest.TestCase):
    def test_progress_is_monotonic_and_ends_at_100(self) -> None:
        process = _fake_install(["Downloading 12%\n", "noise\n", "5%\n", "|■■■■ | 80%\n"])
        with mock.patch.object(startup.subprocess, "Popen", return_value=process) as popen:
            self.assertEqual(list(startup._install_chromium()), [12, 80, 100])
        command = popen.call_args.args[0]
        self.assertEqual(command[1:], ["-m", "playwright", "install", "chromium"])

    def test_failure_reports_recent_output(self) -> None:
        process = _fake_install(["starting\n", "network timeout\n"], returncode=1)
        with mock.patch.object(startup.subprocess, "Popen", return_value=process):
            with self.assertRaisesRegex(RuntimeError, "Chromium install failed: .*network timeout"):
                list(startup._install_chromium())

    def test_failure_without_output_reports_exit_code(self) -> None:
        process = _fake_install([], returncode=7)
        with mock.patch.object(startup.subprocess, "Popen", return_value=process):
            with self.assertRaisesRegex(RuntimeError, "exit code 7"):
                list(startup._install_chromium())

    def test_missing_stdout(self) -> None:
        process = mock.Mock(stdout=None)
        with mock.patch.object(startup.subprocess, "Popen", return_value=process):
            with self.assertRaisesRegex(RuntimeError, "no output captured"):
                list(startup._install_chromium())

    def test_download_percent(self) -> None:
        cases = (("50%", 50), ("  7% of 120 MiB", 7), ("999%", 100), ("done", None))
        for line, expected in cases:
            with self.subTest(line=line):
                self.assertEqual(startup._download_percent(line), expected)


if __name__ == "__main__":
    unittest.main()
