"""Interactive loop for one set of search results.

Reads decoded key events, feeds them to ``ResultsNavigator`` and carries out
the effects it asks for: repainting, editor handoff, leaving. Feature logic
lives in the navigator and the renderers; this module is wiring.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .editor import launch_editor
from .errors import DocumentReadFailure, EditorProcessFailure, StalePathFailure
from .input import TerminalEvent, read_events
from .navigation import Effect, ResultsNavigator, View
from .render import (
    RichRenderer,
    detail_frame,
    error_frame,
    preview_frame,
    results_list_frame,
    table_frame,
    theme_for,
)
from .search import SearchResult
from .terminal import TerminalSession

logger = logging.getLogger(__name__)

EventReader = Callable[[], list[TerminalEvent]]

STALE_PATH_MESSAGE = "File not found in search results. Returning to main menu."
NO_ACTIVE_RESULT_MESSAGE = "No result selected. Returning to main menu."


@dataclass(frozen=True)
class BrowseOutcome:
    """How the browser ended; ``message`` is reported by the outer menu."""

    message: str | None = None


def read_document(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentReadFailure(f"Error reading file: {exc}") from exc


class ResultsBrowser:
    def __init__(
        self,
        results: Sequence[SearchResult],
        session: TerminalSession,
        settings: Settings,
        read_events_fn: EventReader | None = None,
        initial_view: View = View.RESULTS_LIST,
        renderer: RichRenderer | None = None,
    ) -> None:
        self.navigator = ResultsNavigator(results, initial_view=initial_view)
        self.session = session
        self.settings = settings
        self.theme = theme_for(settings.no_color)
        self.renderer = renderer or RichRenderer(settings.style, settings.no_color)
        self._read_events = read_events_fn or (lambda: read_events(session.stdin_fd))

    def _active(self) -> SearchResult:
        active = self.navigator.state.active_result
        if active is None:
            raise StalePathFailure(NO_ACTIVE_RESULT_MESSAGE)
        return active

    def frame(self) -> list[str]:
        """Build the frame for the current view.

        Raises ``DocumentReadFailure`` when the preview cannot be read and
        ``StalePathFailure`` when a detail view has no active result.
        """
        state = self.navigator.state
        results = self.navigator.results
        if state.view is View.RESULTS_LIST:
            return results_list_frame(results, state, self.theme)
        if state.view is View.TABLE:
            return table_frame(results, self.renderer, self.theme)
        active = self._active()
        if state.view is View.RESULT_DETAIL:
            return detail_frame(active, self.theme)
        text = read_document(self.settings.vault_path / active.path)
        return preview_frame(text, self.renderer, self.theme)

    def _open_editor(self) -> None:
        active = self._active()
        try:
            launch_editor(self.settings.vault_path / active.path, self.session, self.settings.editor)
        except EditorProcessFailure as exc:
            logger.error("%s", exc)
            self.session.paint(error_frame(str(exc), self.theme))
            self._read_events()
        if not any(result.path == active.path for result in self.navigator.results):
            raise StalePathFailure(STALE_PATH_MESSAGE)

    def _apply(self, effect: Effect) -> BrowseOutcome | None:
        if effect is Effect.NONE:
            return None
        if effect is Effect.QUIT_PROGRAM:
            raise SystemExit(0)
        if effect is Effect.RETURN_TO_MENU:
            return BrowseOutcome()
        if effect is Effect.OPEN_EDITOR:
            self._open_editor()
        self.session.paint(self.frame())
        return None

    def run(self) -> BrowseOutcome:
        """Run until the user leaves; ``q`` exits the process with code 0."""
        with self.session.raw_mode():
            try:
                self.session.paint(self.frame())
                while True:
                    for event in self._read_events():
                        outcome = self._apply(self.navigator.handle(event))
                        if outcome is not None:
                            return outcome
            except (DocumentReadFailure, StalePathFailure) as exc:
                logger.error("%s", exc)
                return BrowseOutcome(message=str(exc))


def browse_results(
    results: Sequence[SearchResult],
    session: TerminalSession,
    settings: Settings,
    initial_view: View = View.RESULTS_LIST,
) -> BrowseOutcome:
    """Browse ``results``; an empty sequence returns immediately."""
    if not results:
        return BrowseOutcome()
    return ResultsBrowser(results, session, settings, initial_view=initial_view).run()
