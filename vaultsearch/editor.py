"""Editor launch helper for opening a search result.

Runs the configured editor while the terminal session is suspended. The
session is re-acquired however the editor exits.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from .errors import EditorProcessFailure
from .terminal import TerminalSession

logger = logging.getLogger(__name__)


def editor_argv(editor_command: str, target: Path) -> list[str]:
    cmd = shlex.split(editor_command)
    if not cmd:
        raise EditorProcessFailure("Cannot edit: editor command is empty.")
    return [*cmd, str(target)]


def launch_editor(target: Path, session: TerminalSession, editor_command: str) -> int:
    """Open ``target`` in the editor and block until it exits.

    Returns the editor's exit code; a non-zero code is logged, not raised.
    Raises ``EditorProcessFailure`` when the editor cannot be started.
    """
    argv = editor_argv(editor_command, target)
    with session.suspended():
        try:
            completed = subprocess.run(argv, check=False)
        except OSError as exc:
            raise EditorProcessFailure(f"Failed to launch editor: {exc}") from exc
    if completed.returncode != 0:
        logger.warning("editor %r exited with code %d for %s", argv[0], completed.returncode, target)
    return completed.returncode
