"""Frame rendering for the results browser.

Each ``*_frame`` function returns the screen as a list of ANSI-styled rows.
Markdown and tables are delegated to rich; code-block colours use a Pygments
style. Frames are side-effect free; painting happens in ``TerminalSession``.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from io import StringIO
from typing import Sequence

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from .navigation import NavigationState
from .search import SearchResult

FALLBACK_STYLE = "monokai"

WIKI_LINK_RE = re.compile(r"\[\[(.*?)\]\]")
INLINE_TAG_RE = re.compile(r"(?<!\S)#([a-zA-Z0-9_-]+)")
FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---", re.DOTALL)

RESULTS_HINT = "Navigate with arrow keys, press Enter to select, or type a number and press Enter."
RESULTS_KEYS_HINT = "Press 't' for table view, 'q' to quit, 'm' to return to main menu."
DETAIL_MENU = (
    "Options:",
    "o: Open in editor",
    "p: Preview content",
    "r, m: Return to results",
    "Press any key to show menu",
)


@dataclass(frozen=True)
class BrowserTheme:
    """ANSI palette for browser chrome."""

    bold: str
    underline: str
    selected: str
    path: str
    heading: str
    match: str
    error: str
    reset: str


DEFAULT_THEME = BrowserTheme(
    bold="\033[1m",
    underline="\033[1;4m",
    selected="\033[36m",
    path="\033[90m",
    heading="\033[33m",
    match="\033[32m",
    error="\033[31m",
    reset="\033[0m",
)

PLAIN_THEME = BrowserTheme(
    bold="",
    underline="",
    selected="",
    path="",
    heading="",
    match="",
    error="",
    reset="",
)


def theme_for(no_color: bool) -> BrowserTheme:
    return PLAIN_THEME if no_color else DEFAULT_THEME


def normalize_style(style: str) -> str:
    """Return ``style`` if Pygments knows it, else the fallback style."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return FALLBACK_STYLE
    return style


def _styled(theme_code: str, text: str, theme: BrowserTheme) -> str:
    if not theme_code:
        return text
    return f"{theme_code}{text}{theme.reset}"


def rewrite_vault_syntax(text: str) -> str:
    """Rewrite vault-specific syntax into plain Markdown.

    ``[[target|alias]]`` becomes ``[alias](target)``, ``#tag`` becomes an
    inline code span, and a leading front-matter block becomes a ``yaml``
    fenced code block.
    """

    def _link(match: re.Match[str]) -> str:
        target, _sep, alias = match.group(1).partition("|")
        return f"[{alias or target}]({target})"

    rewritten = WIKI_LINK_RE.sub(_link, text)
    rewritten = INLINE_TAG_RE.sub(r"`#\1`", rewritten)
    return FRONT_MATTER_RE.sub(lambda m: f"```yaml\n{m.group(1)}\n```", rewritten, count=1)


class RichRenderer:
    """Render rich renderables into ANSI rows at a fixed width."""

    def __init__(self, style: str = FALLBACK_STYLE, no_color: bool = False, width: int | None = None) -> None:
        self.style = normalize_style(style)
        self.no_color = no_color
        self.width = width

    def _width(self) -> int:
        if self.width is not None:
            return max(20, self.width)
        return max(20, shutil.get_terminal_size((80, 24)).columns)

    def render(self, renderable) -> list[str]:
        buf = StringIO()
        console = Console(
            file=buf,
            width=self._width(),
            force_terminal=not self.no_color,
            no_color=self.no_color,
            color_system=None if self.no_color else "256",
            highlight=False,
        )
        console.print(renderable)
        return buf.getvalue().rstrip("\n").split("\n")

    def markdown(self, text: str) -> list[str]:
        return self.render(Markdown(text, code_theme=self.style, hyperlinks=False))

    def results_table(self, results: Sequence[SearchResult]) -> list[str]:
        table = Table(show_lines=False)
        for header in ("Title", "Path", "Tags", "Date", "Last Modified"):
            table.add_column(header)
        for result in results:
            table.add_row(
                Text(result.title),
                Text(result.path),
                Text(", ".join(result.tags)),
                Text(result.date),
                Text(result.last_modified),
            )
        return self.render(table)


def _result_rows(index: int, result: SearchResult, selected: bool, theme: BrowserTheme) -> list[str]:
    prefix = "> " if selected else "  "
    rows = [
        f"{prefix}{index + 1}. {result.title} ({len(result.matches)} matches)",
        f"   Tags: {', '.join(result.tags) or 'No tags'}",
        f"   Date: {result.date}",
        f"   Last Modified: {result.last_modified}",
    ]
    if not selected:
        return rows
    return [_styled(theme.selected, row, theme) for row in rows]


def results_list_frame(
    results: Sequence[SearchResult],
    state: NavigationState,
    theme: BrowserTheme = DEFAULT_THEME,
) -> list[str]:
    lines = [_styled(theme.bold, "Search Results:", theme)]
    for index, result in enumerate(results):
        lines.extend(_result_rows(index, result, index == state.selected_index, theme))
    lines.append("")
    lines.append(RESULTS_HINT)
    lines.append(RESULTS_KEYS_HINT)
    if state.numeric_input_buffer:
        lines.append(f"Go to: {state.numeric_input_buffer}")
    return lines


def table_frame(
    results: Sequence[SearchResult],
    renderer: RichRenderer,
    theme: BrowserTheme = DEFAULT_THEME,
) -> list[str]:
    lines = [_styled(theme.bold, "Search Results:", theme)]
    lines.extend(renderer.results_table(results))
    lines.append("")
    lines.append("Press any key to return to results...")
    return lines


def detail_frame(result: SearchResult, theme: BrowserTheme = DEFAULT_THEME) -> list[str]:
    lines = [
        "",
        _styled(theme.bold, f"File: {result.title}", theme),
        _styled(theme.path, f"Path: {result.path}", theme),
        "",
        _styled(theme.heading, "Matches:", theme),
    ]
    for index, match in enumerate(result.matches):
        lines.append(_styled(theme.match, f"  {index + 1}. {match}", theme))
    lines.append("")
    lines.extend(DETAIL_MENU)
    return lines


def preview_frame(text: str, renderer: RichRenderer, theme: BrowserTheme = DEFAULT_THEME) -> list[str]:
    lines = ["", _styled(theme.underline, "File Preview:", theme), ""]
    lines.extend(renderer.markdown(rewrite_vault_syntax(text)))
    lines.append("")
    lines.append("Press any key to return...")
    return lines


def error_frame(message: str, theme: BrowserTheme = DEFAULT_THEME) -> list[str]:
    return [_styled(theme.error, message, theme), "", "Press any key to continue..."]
