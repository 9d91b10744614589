"""Terminal mode ownership for the results browser.

``TerminalSession`` is the single owner of raw mode. ``raw_mode()`` acquires
it for the browser loop and ``suspended()`` hands the terminal back to a child
process, re-acquiring exactly once when the child is done.
"""

from __future__ import annotations

import contextlib
import logging
import os
import termios
import tty

from .errors import TerminalSessionError

logger = logging.getLogger(__name__)

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"
CLEAR_SCREEN = "\x1b[H\x1b[2J"


class TerminalSession:
    """Own the tty mode of one stdin/stdout pair."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._raw_held = False

    @property
    def raw_held(self) -> bool:
        return self._raw_held

    def enable_raw_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)

    def disable_raw_mode(self) -> None:
        """Restore the saved tty state and the main screen buffer."""
        os.write(self.stdout_fd, LEAVE_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def _acquire(self) -> None:
        if self._raw_held:
            raise TerminalSessionError("raw mode is already held")
        self.enable_raw_mode()
        self._raw_held = True

    def _release(self) -> None:
        if not self._raw_held:
            raise TerminalSessionError("raw mode is not held")
        self._raw_held = False
        self.disable_raw_mode()

    @contextlib.contextmanager
    def raw_mode(self):
        self._acquire()
        try:
            yield self
        finally:
            self._release()

    @contextlib.contextmanager
    def suspended(self):
        """Temporarily give the terminal back in cooked mode."""
        self._release()
        logger.debug("raw mode suspended")
        try:
            yield
        finally:
            self._acquire()
            logger.debug("raw mode resumed")

    def write(self, text: str) -> None:
        os.write(self.stdout_fd, text.encode("utf-8", errors="replace"))

    def paint(self, lines: list[str]) -> None:
        """Clear the screen and draw ``lines``.

        Raw mode turns off output post-processing, so rows are joined with
        CRLF explicitly.
        """
        self.write(CLEAR_SCREEN + "\r\n".join(lines))
