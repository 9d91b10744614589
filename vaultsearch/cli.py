"""Command-line front door for vaultsearch.

Parses options, resolves settings, and dispatches to one vault command or to
the interactive main menu. Search results are browsed in raw terminal mode
when stdin is a TTY and printed as a plain listing otherwise.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import asdict

from rich.console import Console
from rich.prompt import Confirm, Prompt

from . import config as config_mod
from .browser import browse_results
from .config import Settings, resolve_settings
from .errors import SearchFailure, VaultError
from .logs import configure_logging
from .navigation import View
from .search import SearchResult, aggregate_matches
from .terminal import TerminalSession
from .vault import (
    add_tag_to_subpath,
    collect_tags,
    count_files_without_tags,
    find_backlinks,
    list_markdown_files,
    update_tags,
)

logger = logging.getLogger(__name__)

MENU_CHOICES: tuple[tuple[str, str], ...] = (
    ("list", "List all markdown files"),
    ("update-tags", "Update tags for multiple files"),
    ("tags", "Get all unique tags across files"),
    ("add-tag", "Add a tag to all files in a specific subpath"),
    ("search", "Search content across files"),
    ("backlinks", "List backlinks for a file"),
    ("exit", "Exit"),
)

REPLACE_WARNING = "⚠️  Warning: Existing tags will be replaced!"


def make_console(no_color: bool = False, file=None) -> Console:
    """Line-mode console; text is printed without markup or wrapping."""
    return Console(file=file, no_color=no_color, highlight=False, soft_wrap=True, emoji=False)


def _say(console: Console, text: str = "", style: str | None = None) -> None:
    console.print(text, style=style, markup=False)


def _success(console: Console, text: str) -> None:
    _say(console, text, "green")


def _warning(console: Console, text: str) -> None:
    _say(console, text, "yellow")


def _error(console: Console, text: str) -> None:
    _say(console, text, "red")


def split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _ask(console: Console, prompt: str, required_message: str | None = None, default: str = "") -> str:
    while True:
        answer = Prompt.ask(prompt, console=console).strip()
        if answer:
            return answer
        if required_message is None:
            return default
        _warning(console, required_message)


def _confirm(console: Console, prompt: str, default: bool = False) -> bool:
    return Confirm.ask(prompt, console=console, default=default)


def cmd_list(settings: Settings, console: Console) -> int:
    try:
        files = list_markdown_files(settings.vault_path)
        untagged = count_files_without_tags(settings.vault_path, files)
    except VaultError as exc:
        _error(console, f"Failed to list files\n❌ Error: {exc}")
        return 1
    _say(console, "\n".join(files))
    _success(console, f"📁 {len(files)} files found")
    _success(console, f"🏷️ {untagged} files without frontmatter tags")
    return 0


def cmd_tags(settings: Settings, console: Console, subpath: str = "", inline: bool = False) -> int:
    try:
        tags = collect_tags(settings.vault_path, subpath, inline=inline)
    except VaultError as exc:
        _error(console, f"Failed to get tags\n❌ Error: {exc}")
        return 1
    _say(console, ", ".join(tags))
    return 0


def cmd_update_tags(
    settings: Settings,
    console: Console,
    files: list[str],
    tags: list[str],
    replace: bool = False,
) -> int:
    if replace:
        _warning(console, REPLACE_WARNING)
    try:
        count = update_tags(settings.vault_path, files, tags, replace=replace)
    except VaultError as exc:
        _error(console, f"Failed to update tags\n❌ Error: {exc}")
        return 1
    _success(console, f"Tags updated in {count} files")
    return 0


def cmd_add_tag(settings: Settings, console: Console, subpath: str, tag: str, replace: bool = False) -> int:
    if replace:
        _warning(console, REPLACE_WARNING)
    try:
        count = add_tag_to_subpath(settings.vault_path, subpath, tag, replace=replace)
    except VaultError as exc:
        _error(console, f"Failed to add tag\n❌ Error: {exc}")
        return 1
    _success(console, f"Tag added to {count} files")
    return 0


def cmd_backlinks(settings: Settings, console: Console, file: str) -> int:
    try:
        backlinks = find_backlinks(settings.vault_path, file)
    except VaultError as exc:
        _error(console, f"Failed to find backlinks\n❌ Error: {exc}")
        return 1
    _say(console, json.dumps([asdict(link) for link in backlinks], indent=2, ensure_ascii=False))
    return 0


def print_results(results: list[SearchResult], console: Console) -> None:
    """Plain listing used when stdin is not a terminal."""
    for index, result in enumerate(results):
        _say(console, f"{index + 1}. {result.title} ({len(result.matches)} matches)")
        _say(console, f"   Path: {result.path}")
        _say(console, f"   Tags: {', '.join(result.tags) or 'No tags'}")
        for match in result.matches:
            _say(console, f"     - {match}")


def _default_session() -> TerminalSession | None:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        return None
    return TerminalSession(sys.stdin.fileno(), sys.stdout.fileno())


def cmd_search(
    settings: Settings,
    console: Console,
    query: str,
    table: bool = False,
    session_factory: Callable[[], TerminalSession | None] = _default_session,
) -> int:
    """Search the vault and browse the results.

    Returns 1 when the search failed or the browser ended with an error
    message; ``q`` inside the browser exits the process directly.
    """
    _say(console, "Searching content...")
    try:
        results = aggregate_matches(settings.vault_path, query, glob=settings.document_glob)
    except SearchFailure as exc:
        logger.error("search failed: %s", exc)
        _error(console, f"Failed to search content\n❌ Error: {exc}")
        return 1
    if not results:
        _say(console, "No matches found.")
        return 0
    _success(console, "Search completed")

    session = session_factory()
    if session is None:
        print_results(results, console)
        return 0
    outcome = browse_results(
        results,
        session,
        settings,
        initial_view=View.TABLE if table else View.RESULTS_LIST,
    )
    if outcome.message:
        _error(console, outcome.message)
        return 1
    return 0


def _menu_choice(answer: str) -> str | None:
    answer = answer.strip()
    if answer.isdigit():
        index = int(answer) - 1
        if 0 <= index < len(MENU_CHOICES):
            return MENU_CHOICES[index][0]
        return None
    for value, _label in MENU_CHOICES:
        if answer == value:
            return value
    return None


def _run_menu_action(action: str, settings: Settings, console: Console) -> None:
    if action == "list":
        cmd_list(settings, console)
    elif action == "update-tags":
        files = split_csv(_ask(console, "Enter file paths (comma-separated)"))
        tags = split_csv(_ask(console, "Enter tags to set (comma-separated)"))
        replace = _confirm(console, "Replace existing tags instead of appending?")
        cmd_update_tags(settings, console, files, tags, replace=replace)
    elif action == "tags":
        cmd_tags(settings, console, _ask(console, "Enter subpath within the vault (optional)"))
    elif action == "add-tag":
        subpath = _ask(console, "Enter subpath within the vault", "Subpath is required")
        tag = _ask(console, "Enter tag to add", "Tag is required")
        replace = _confirm(console, "Replace existing tags instead of appending?")
        cmd_add_tag(settings, console, subpath, tag, replace=replace)
    elif action == "search":
        cmd_search(settings, console, _ask(console, "Enter search query", "Search query is required"))
    elif action == "backlinks":
        cmd_backlinks(settings, console, _ask(console, "Enter file path to find backlinks for", "File path is required"))


def main_menu(settings: Settings, console: Console) -> int:
    """Prompt for actions until the user picks Exit or input ends."""
    while True:
        _say(console)
        _say(console, "What would you like to do?")
        for index, (_value, label) in enumerate(MENU_CHOICES):
            _say(console, f"  {index + 1}. {label}")
        try:
            action = _menu_choice(Prompt.ask("Choose an option", console=console))
            if action is None:
                _warning(console, "Please choose one of the listed options.")
                continue
            if action == "exit":
                _say(console, "Goodbye!")
                return 0
            _run_menu_action(action, settings, console)
        except EOFError:
            _say(console, "Goodbye!")
            return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vaultsearch",
        description="Search and browse a Markdown vault from the terminal.",
    )
    parser.add_argument("--vault", default=None, help="Vault root (default: $VAULT_PATH, config, ./vault).")
    parser.add_argument("--editor", default=None, help="Editor command (default: $EDITOR, config, vim).")
    parser.add_argument("--style", default=None, help="Pygments style name for code blocks in previews.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to the log file.")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("menu", help="Interactive main menu (default).")

    search = subparsers.add_parser("search", help="Search content across files.")
    search.add_argument("query")
    search.add_argument("--table", action="store_true", help="Start in table view.")

    subparsers.add_parser("list", help="List all markdown files.")

    tags = subparsers.add_parser("tags", help="Get all unique tags across files.")
    tags.add_argument("subpath", nargs="?", default="")
    tags.add_argument("--inline", action="store_true", help="Include #tags found in document bodies.")

    update = subparsers.add_parser("update-tags", help="Update tags for multiple files.")
    update.add_argument("--files", type=split_csv, required=True, help="Comma-separated vault-relative paths.")
    update.add_argument("--tags", type=split_csv, required=True, help="Comma-separated tags.")
    update.add_argument("--replace", action="store_true", help="Replace existing tags instead of appending.")

    add_tag = subparsers.add_parser("add-tag", help="Add a tag to all files in a subpath.")
    add_tag.add_argument("subpath")
    add_tag.add_argument("tag")
    add_tag.add_argument("--replace", action="store_true", help="Replace existing tags instead of appending.")

    backlinks = subparsers.add_parser("backlinks", help="List backlinks for a file.")
    backlinks.add_argument("file")

    subparsers.add_parser("config", help="Save --vault/--editor/--style as defaults.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run the selected command, and exit with its status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    if args.command == "config":
        saved = config_mod.save_defaults(vault_path=args.vault, editor=args.editor, style=args.style)
        console = make_console(no_color=args.no_color)
        _say(console, json.dumps(saved, indent=2))
        _say(console, f"Saved to {config_mod.CONFIG_PATH}")
        return

    settings = resolve_settings(
        vault_path=args.vault,
        editor=args.editor,
        style=args.style,
        no_color=args.no_color,
    )
    console = make_console(no_color=settings.no_color)
    logger.info("vault root %s", settings.vault_path)

    if args.command == "search":
        code = cmd_search(settings, console, args.query, table=args.table)
    elif args.command == "list":
        code = cmd_list(settings, console)
    elif args.command == "tags":
        code = cmd_tags(settings, console, args.subpath, inline=args.inline)
    elif args.command == "update-tags":
        code = cmd_update_tags(settings, console, args.files, args.tags, replace=args.replace)
    elif args.command == "add-tag":
        code = cmd_add_tag(settings, console, args.subpath, args.tag, replace=args.replace)
    elif args.command == "backlinks":
        code = cmd_backlinks(settings, console, args.file)
    else:
        code = main_menu(settings, console)
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
