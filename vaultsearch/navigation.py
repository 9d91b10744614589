"""Navigation state machine for browsing search results.

Every view has one handler in a dispatch table. Handlers mutate
``NavigationState`` and return an ``Effect`` describing what the caller must
do next (redraw, open the editor, leave). They never touch the terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from .input import EventKind, TerminalEvent
from .search import SearchResult


class View(Enum):
    RESULTS_LIST = "results_list"
    RESULT_DETAIL = "result_detail"
    PREVIEW = "preview"
    TABLE = "table"


class Effect(Enum):
    NONE = "none"
    REDRAW = "redraw"
    OPEN_EDITOR = "open_editor"
    QUIT_PROGRAM = "quit_program"
    RETURN_TO_MENU = "return_to_menu"


@dataclass
class NavigationState:
    view: View = View.RESULTS_LIST
    selected_index: int = 0
    numeric_input_buffer: str = ""
    active_result: SearchResult | None = None


class ResultsNavigator:
    """Drive ``NavigationState`` over an immutable result sequence."""

    def __init__(self, results: Sequence[SearchResult], initial_view: View = View.RESULTS_LIST) -> None:
        if not results:
            raise ValueError("cannot navigate an empty result list")
        if initial_view not in (View.RESULTS_LIST, View.TABLE):
            raise ValueError(f"cannot start in {initial_view.value}")
        self.results: tuple[SearchResult, ...] = tuple(results)
        self.state = NavigationState(view=initial_view)
        self._handlers: dict[View, Callable[[TerminalEvent], Effect]] = {
            View.RESULTS_LIST: self._on_results_list,
            View.RESULT_DETAIL: self._on_result_detail,
            View.PREVIEW: self._on_preview,
            View.TABLE: self._on_table,
        }

    @property
    def selected_result(self) -> SearchResult:
        return self.results[self.state.selected_index]

    def handle(self, event: TerminalEvent) -> Effect:
        return self._handlers[self.state.view](event)

    def _move(self, delta: int) -> Effect:
        state = self.state
        state.numeric_input_buffer = ""
        target = max(0, min(len(self.results) - 1, state.selected_index + delta))
        if target == state.selected_index:
            return Effect.NONE
        state.selected_index = target
        return Effect.REDRAW

    def _append_digit(self, d: str) -> Effect:
        state = self.state
        state.numeric_input_buffer += d
        number = int(state.numeric_input_buffer)
        if 1 <= number <= len(self.results):
            state.selected_index = number - 1
            return Effect.REDRAW
        return Effect.NONE

    def _on_results_list(self, event: TerminalEvent) -> Effect:
        state = self.state
        if event.kind is EventKind.MOVE_UP:
            return self._move(-1)
        if event.kind is EventKind.MOVE_DOWN:
            return self._move(1)
        if event.kind is EventKind.DIGIT:
            return self._append_digit(event.text)
        if event.kind is EventKind.COMMIT:
            # Any buffered number was already applied live.
            state.numeric_input_buffer = ""
            state.active_result = self.results[state.selected_index]
            state.view = View.RESULT_DETAIL
            return Effect.REDRAW
        if event.kind is EventKind.QUIT or event.is_letter("q"):
            return Effect.QUIT_PROGRAM
        state.numeric_input_buffer = ""
        if event.is_letter("m"):
            return Effect.RETURN_TO_MENU
        if event.is_letter("t"):
            state.view = View.TABLE
            return Effect.REDRAW
        return Effect.NONE

    def _on_result_detail(self, event: TerminalEvent) -> Effect:
        state = self.state
        if event.kind is EventKind.QUIT:
            return Effect.QUIT_PROGRAM
        if event.is_letter("o"):
            return Effect.OPEN_EDITOR
        if event.is_letter("p"):
            state.view = View.PREVIEW
            return Effect.REDRAW
        if event.is_letter("r") or event.is_letter("m"):
            state.view = View.RESULTS_LIST
            state.active_result = None
            return Effect.REDRAW
        return Effect.REDRAW

    def _on_preview(self, event: TerminalEvent) -> Effect:
        if event.kind is EventKind.QUIT:
            return Effect.QUIT_PROGRAM
        self.state.view = View.RESULT_DETAIL
        return Effect.REDRAW

    def _on_table(self, event: TerminalEvent) -> Effect:
        if event.kind is EventKind.QUIT:
            return Effect.QUIT_PROGRAM
        self.state.view = View.RESULTS_LIST
        return Effect.REDRAW
