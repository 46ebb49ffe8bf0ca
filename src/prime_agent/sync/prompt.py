"""Interactive hunk chooser for terminal use."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from prime_agent.errors import StorageError
from prime_agent.sync.merge import Choice, Hunk

logger = logging.getLogger(__name__)

PROMPT = "Choose [s]kill or [a]gents for this hunk: "

_ANSWERS = {
    "s": Choice.LEFT,
    "skill": Choice.LEFT,
    "l": Choice.LEFT,
    "left": Choice.LEFT,
    "a": Choice.RIGHT,
    "agents": Choice.RIGHT,
    "r": Choice.RIGHT,
    "right": Choice.RIGHT,
}


def parse_answer(raw: str) -> Choice | None:
    return _ANSWERS.get(raw.strip().lower())


class ConsoleChooser:
    """Shows each hunk and reads one answer line per hunk.

    Unrecognised answers re-prompt. End of input raises StorageError, which
    aborts the sync before the current skill is written.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    def __call__(self, name: str, hunk: Hunk) -> Choice:
        self._stdout.write(f"\nConflict in skill '{name}':\n{hunk.render()}")
        while True:
            self._stdout.write(PROMPT)
            self._stdout.flush()
            line = self._stdin.readline()
            if not line:
                raise StorageError(f"stdin closed during conflict resolution for '{name}'")
            choice = parse_answer(line)
            if choice is not None:
                return choice
            logger.debug("Unrecognised answer %r", line)
            self._stdout.write("Enter 's' or 'a'.\n")
