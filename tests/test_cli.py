"""Tests for CLI dispatch, the search command, and the main menu."""

from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import vaultsearch
from vaultsearch import cli
from vaultsearch.browser import BrowseOutcome
from vaultsearch.config import Settings
from vaultsearch.errors import SearchFailure
from vaultsearch.metadata import load_metadata
from vaultsearch.navigation import View
from vaultsearch.search import SearchResult

RESULT = SearchResult(title="a", path="a.md", matches=("hit",), tags=("t",))


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.settings = Settings(vault_path=self.root, editor="vim", no_color=True)
        self.out = io.StringIO()
        self.console = cli.make_console(no_color=True, file=self.out)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class SearchCommandTests(CliTestCase):
    def test_search_failure_is_reported(self) -> None:
        with mock.patch("vaultsearch.cli.aggregate_matches", side_effect=SearchFailure("rg is not installed.")):
            code = cli.cmd_search(self.settings, self.console, "x")
        self.assertEqual(code, 1)
        self.assertIn("rg is not installed.", self.out.getvalue())

    def test_no_matches_skips_browser(self) -> None:
        factory = mock.Mock()
        with mock.patch("vaultsearch.cli.aggregate_matches", return_value=[]):
            code = cli.cmd_search(self.settings, self.console, "x", session_factory=factory)
        self.assertEqual(code, 0)
        self.assertIn("No matches found.", self.out.getvalue())
        factory.assert_not_called()

    def test_non_tty_prints_plain_listing(self) -> None:
        with mock.patch("vaultsearch.cli.aggregate_matches", return_value=[RESULT]):
            code = cli.cmd_search(self.settings, self.console, "x", session_factory=lambda: None)
        self.assertEqual(code, 0)
        self.assertIn("1. a (1 matches)", self.out.getvalue())
        self.assertIn("     - hit", self.out.getvalue())

    def test_browser_message_is_reported(self) -> None:
        session = object()
        with mock.patch("vaultsearch.cli.aggregate_matches", return_value=[RESULT]), mock.patch(
            "vaultsearch.cli.browse_results", return_value=BrowseOutcome(message="File not found")
        ) as browse_mock:
            code = cli.cmd_search(self.settings, self.console, "x", table=True, session_factory=lambda: session)
        self.assertEqual(code, 1)
        self.assertIn("File not found", self.out.getvalue())
        browse_mock.assert_called_once_with([RESULT], session, self.settings, initial_view=View.TABLE)


class MenuTests(CliTestCase):
    def test_menu_runs_list_then_exits(self) -> None:
        (self.root / "n.md").write_text("x\n", encoding="utf-8")
        with mock.patch("vaultsearch.cli.Prompt.ask", side_effect=["1", "7"]):
            code = cli.main_menu(self.settings, self.console)
        output = self.out.getvalue()
        self.assertEqual(code, 0)
        self.assertIn("n.md", output)
        self.assertIn("📁 1 files found", output)
        self.assertIn("Goodbye!", output)

    def test_menu_rejects_unknown_choice_and_handles_eof(self) -> None:
        with mock.patch("vaultsearch.cli.Prompt.ask", side_effect=["99", EOFError()]):
            code = cli.main_menu(self.settings, self.console)
        self.assertEqual(code, 0)
        self.assertIn("Please choose one of the listed options.", self.out.getvalue())

    def test_menu_search_prompts_until_query_given(self) -> None:
        with mock.patch("vaultsearch.cli.Prompt.ask", side_effect=["search", "", "needle", "exit"]), mock.patch(
            "vaultsearch.cli.cmd_search", return_value=0
        ) as search_mock:
            cli.main_menu(self.settings, self.console)
        search_mock.assert_called_once_with(self.settings, self.console, "needle")
        self.assertIn("Search query is required", self.out.getvalue())

    def test_menu_add_tag_asks_for_replace_confirmation(self) -> None:
        (self.root / "sub").mkdir()
        (self.root / "sub" / "n.md").write_text("---\ntags: [old]\n---\nbody\n", encoding="utf-8")
        with mock.patch("vaultsearch.cli.Prompt.ask", side_effect=["4", "sub", "new", "7"]), mock.patch(
            "vaultsearch.cli.Confirm.ask", return_value=True
        ) as confirm_mock:
            cli.main_menu(self.settings, self.console)
        confirm_mock.assert_called_once()
        self.assertIs(confirm_mock.call_args.kwargs["console"], self.console)
        self.assertIn("Warning: Existing tags will be replaced!", self.out.getvalue())
        self.assertIn("Tag added to 1 files", self.out.getvalue())
        self.assertEqual(load_metadata(self.root / "sub" / "n.md").tags, ("new",))

    def test_output_keeps_brackets_literal(self) -> None:
        cli.print_results([SearchResult(title="a", path="a.md", matches=("see [[b]] and [red]x[/red]",))], self.console)
        self.assertIn("     - see [[b]] and [red]x[/red]", self.out.getvalue())


class MainDispatchTests(unittest.TestCase):
    def test_parser_splits_comma_lists(self) -> None:
        args = cli.build_parser().parse_args(["update-tags", "--files", "a.md, b.md", "--tags", "x,,y"])
        self.assertEqual(args.files, ["a.md", "b.md"])
        self.assertEqual(args.tags, ["x", "y"])

    def test_main_dispatches_tags_and_exits_on_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch("vaultsearch.cli.configure_logging"), mock.patch(
            "vaultsearch.cli.cmd_tags", return_value=1
        ) as tags_mock:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--vault", tmp, "--no-color", "tags", "sub", "--inline"])
        self.assertEqual(ctx.exception.code, 1)
        settings = tags_mock.call_args.args[0]
        self.assertEqual(settings.vault_path, Path(tmp))
        self.assertTrue(settings.no_color)
        self.assertEqual(tags_mock.call_args.args[2], "sub")
        self.assertTrue(tags_mock.call_args.kwargs["inline"])

    def test_main_defaults_to_menu(self) -> None:
        with mock.patch("vaultsearch.cli.configure_logging"), mock.patch(
            "vaultsearch.cli.main_menu", return_value=0
        ) as menu_mock:
            cli.main(["--vault", "/tmp/v"])
        menu_mock.assert_called_once()

    def test_package_main_forwards_argv(self) -> None:
        with mock.patch("vaultsearch.cli.main") as cli_main:
            vaultsearch.main(["list"])
        cli_main.assert_called_once_with(["list"])


if __name__ == "__main__":
    unittest.main()
