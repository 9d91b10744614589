"""Tests for browser frames and vault syntax rewriting."""

from __future__ import annotations

import unittest

from vaultsearch.navigation import NavigationState
from vaultsearch.render import (
    DEFAULT_THEME,
    FALLBACK_STYLE,
    PLAIN_THEME,
    RichRenderer,
    detail_frame,
    normalize_style,
    preview_frame,
    results_list_frame,
    rewrite_vault_syntax,
    table_frame,
)
from vaultsearch.search import SearchResult

RESULTS = [
    SearchResult(title="alpha", path="a/alpha.md", matches=("x", "y"), tags=("t1", "t2"), date="2024-01-01"),
    SearchResult(title="beta", path="beta.md", matches=("z",)),
]


class RewriteVaultSyntaxTests(unittest.TestCase):
    def test_wiki_links_become_markdown_links(self) -> None:
        self.assertEqual(rewrite_vault_syntax("see [[Other Note]]"), "see [Other Note](Other Note)")
        self.assertEqual(rewrite_vault_syntax("see [[target|shown]]"), "see [shown](target)")

    def test_inline_tags_become_code_spans(self) -> None:
        self.assertEqual(rewrite_vault_syntax("#idea and #to-do but a#b"), "`#idea` and `#to-do` but a#b")

    def test_leading_front_matter_becomes_yaml_fence(self) -> None:
        text = "---\ntags: [a]\n---\n# Title\n"
        self.assertEqual(rewrite_vault_syntax(text), "```yaml\ntags: [a]\n```\n# Title\n")

    def test_headings_are_left_alone(self) -> None:
        self.assertEqual(rewrite_vault_syntax("# Heading"), "# Heading")


class FrameTests(unittest.TestCase):
    def test_results_list_highlights_selected_entry(self) -> None:
        lines = results_list_frame(RESULTS, NavigationState(selected_index=1), DEFAULT_THEME)

        self.assertIn("  1. alpha (2 matches)", lines)
        self.assertIn(f"{DEFAULT_THEME.selected}> 2. beta (1 matches){DEFAULT_THEME.reset}", lines)
        self.assertIn("   Tags: t1, t2", lines)
        self.assertIn(f"{DEFAULT_THEME.selected}   Tags: No tags{DEFAULT_THEME.reset}", lines)

    def test_results_list_shows_pending_number(self) -> None:
        lines = results_list_frame(RESULTS, NavigationState(numeric_input_buffer="12"), PLAIN_THEME)
        self.assertEqual(lines[-1], "Go to: 12")

    def test_detail_lists_numbered_matches_and_menu(self) -> None:
        lines = detail_frame(RESULTS[0], PLAIN_THEME)
        self.assertIn("File: alpha", lines)
        self.assertIn("Path: a/alpha.md", lines)
        self.assertIn("  1. x", lines)
        self.assertIn("  2. y", lines)
        self.assertIn("o: Open in editor", lines)
        self.assertIn("p: Preview content", lines)

    def test_table_contains_every_result(self) -> None:
        renderer = RichRenderer(no_color=True, width=100)
        text = "\n".join(table_frame(RESULTS, renderer, PLAIN_THEME))
        for fragment in ("Title", "Last Modified", "alpha", "a/alpha.md", "t1, t2", "beta"):
            self.assertIn(fragment, text)

    def test_preview_renders_rewritten_markdown(self) -> None:
        renderer = RichRenderer(no_color=True, width=80)
        text = "\n".join(preview_frame("---\ndate: 2024\n---\n# Title\nSee [[Other|the other]] #tag\n", renderer, PLAIN_THEME))
        self.assertIn("File Preview:", text)
        self.assertIn("Title", text)
        self.assertIn("the other", text)
        self.assertIn("#tag", text)
        self.assertIn("date: 2024", text)
        self.assertNotIn("[[", text)

    def test_unknown_pygments_style_falls_back(self) -> None:
        self.assertEqual(normalize_style("no-such-style"), FALLBACK_STYLE)
        self.assertEqual(normalize_style("friendly"), "friendly")


if __name__ == "__main__":
    unittest.main()
