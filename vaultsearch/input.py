"""Raw terminal input decoding.

Classifies bytes read from stdin in raw mode into ``TerminalEvent`` values.
Classification is pure; only ``read_events`` touches the file descriptor.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

READ_CHUNK_BYTES = 64

COMMAND_LETTERS = frozenset("qmoprt")

ARROW_SEQUENCES: dict[bytes, str] = {
    b"\x1b[A": "MOVE_UP",
    b"\x1bOA": "MOVE_UP",
    b"\x1b[B": "MOVE_DOWN",
    b"\x1bOB": "MOVE_DOWN",
}

# Other CSI/SS3 sequences (left/right, home/end, F-keys) decode as one
# unrecognized event instead of a stray ESC plus printable letters.
_CSI_FINAL_RANGE = (0x40, 0x7E)


class EventKind(Enum):
    MOVE_UP = "MOVE_UP"
    MOVE_DOWN = "MOVE_DOWN"
    COMMIT = "COMMIT"
    DIGIT = "DIGIT"
    LETTER = "LETTER"
    QUIT = "QUIT"
    UNRECOGNIZED = "UNRECOGNIZED"


@dataclass(frozen=True)
class TerminalEvent:
    kind: EventKind
    text: str = ""

    @property
    def digit(self) -> str | None:
        return self.text if self.kind is EventKind.DIGIT else None

    def is_letter(self, letter: str) -> bool:
        return self.kind is EventKind.LETTER and self.text == letter


MOVE_UP = TerminalEvent(EventKind.MOVE_UP)
MOVE_DOWN = TerminalEvent(EventKind.MOVE_DOWN)
COMMIT = TerminalEvent(EventKind.COMMIT)
QUIT = TerminalEvent(EventKind.QUIT)


def digit(d: str) -> TerminalEvent:
    return TerminalEvent(EventKind.DIGIT, d)


def letter(c: str) -> TerminalEvent:
    return TerminalEvent(EventKind.LETTER, c)


def unrecognized(text: str = "") -> TerminalEvent:
    return TerminalEvent(EventKind.UNRECOGNIZED, text)


def decode_chunk(chunk: bytes) -> TerminalEvent:
    """Classify one input chunk as a single event."""
    kind = ARROW_SEQUENCES.get(chunk)
    if kind is not None:
        return MOVE_UP if kind == "MOVE_UP" else MOVE_DOWN
    if chunk == b"\r":
        return COMMIT
    if chunk == b"\x03":
        return QUIT
    if len(chunk) == 1:
        ch = chr(chunk[0])
        if "0" <= ch <= "9":
            return digit(ch)
        if ch in COMMAND_LETTERS:
            return letter(ch)
    return unrecognized(chunk.decode("utf-8", errors="replace"))


def _escape_sequence_length(chunk: bytes, start: int) -> int:
    """Return the byte length of the escape sequence at ``start``."""
    n = len(chunk)
    if start + 1 >= n:
        return 1
    intro = chunk[start + 1]
    if intro == ord("O"):
        return min(3, n - start)
    if intro != ord("["):
        return 1
    idx = start + 2
    while idx < n:
        if _CSI_FINAL_RANGE[0] <= chunk[idx] <= _CSI_FINAL_RANGE[1]:
            return idx - start + 1
        idx += 1
    return n - start


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def split_events(chunk: bytes) -> list[TerminalEvent]:
    """Split a chunk holding several keystrokes into one event per key.

    Escape sequences stay atomic; multi-byte UTF-8 characters become one
    unrecognized event.
    """
    events: list[TerminalEvent] = []
    i = 0
    n = len(chunk)
    while i < n:
        if chunk[i] == 0x1B:
            size = _escape_sequence_length(chunk, i)
        else:
            size = min(_utf8_length(chunk[i]), n - i)
        events.append(decode_chunk(chunk[i : i + size]))
        i += size
    return events


def read_events(fd: int) -> list[TerminalEvent]:
    """Block for one chunk of input and decode it.

    End of input is reported as ``QUIT`` so the caller never spins.
    """
    chunk = os.read(fd, READ_CHUNK_BYTES)
    if not chunk:
        return [QUIT]
    return split_events(chunk)
