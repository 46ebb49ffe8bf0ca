"""Line-level diff between two versions of a skill, resolved hunk by hunk.

``left`` is always the skill file, ``right`` the AGENTS section. The diff is
grouped into hunks with three lines of context; a chooser picks one side
per hunk. Equal lines outside every hunk are carried through unchanged, so
each input line ends up kept or dropped exactly once.
"""

from __future__ import annotations

import difflib
import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Literal

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


class Choice(enum.Enum):
    LEFT = "skill"
    RIGHT = "agents"


@dataclass(frozen=True)
class Change:
    tag: Literal["equal", "delete", "insert"]
    value: str

    @property
    def sign(self) -> str:
        return {"equal": " ", "delete": "-", "insert": "+"}[self.tag]


@dataclass
class Hunk:
    """A run of changes plus surrounding context.

    Starts are 0-based line offsets into the left and right texts.
    """

    left_start: int
    left_count: int
    right_start: int
    right_count: int
    changes: list[Change] = field(default_factory=list)

    def render(self) -> str:
        out = [
            f"@@ -{_hunk_range(self.left_start, self.left_count)} "
            f"+{_hunk_range(self.right_start, self.right_count)} @@\n"
        ]
        for change in self.changes:
            line = change.sign + change.value
            out.append(line if line.endswith("\n") else line + "\n")
        return "".join(out)

    def resolve(self, choice: Choice) -> str:
        keep = "delete" if choice is Choice.LEFT else "insert"
        return "".join(
            change.value for change in self.changes if change.tag in ("equal", keep)
        )


def _hunk_range(start: int, count: int) -> str:
    # Unified diff numbers an empty range by the line before it.
    return f"{start + 1 if count else start},{count}"


# Decides one hunk of the named skill.
Chooser = Callable[[str, Hunk], Choice]


def split_lines_keepends(text: str) -> list[str]:
    """Split on ``\\n`` only; ``"".join(result) == text``."""
    return _LINE_RE.findall(text)


def normalize_content(content: str) -> str:
    """CRLF to LF, then drop trailing line breaks. Only used for equality."""
    return content.replace("\r\n", "\n").rstrip("\r\n")


def contents_match(left: str, right: str) -> bool:
    return normalize_content(left) == normalize_content(right)


def build_hunks(left: str, right: str, context: int = CONTEXT_LINES) -> list[Hunk]:
    """Group the line diff of *left* → *right* into hunks."""
    a = split_lines_keepends(left)
    b = split_lines_keepends(right)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)

    hunks: list[Hunk] = []
    for group in matcher.get_grouped_opcodes(context):
        changes: list[Change] = []
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                changes.extend(Change("equal", line) for line in a[i1:i2])
                continue
            if tag in ("delete", "replace"):
                changes.extend(Change("delete", line) for line in a[i1:i2])
            if tag in ("insert", "replace"):
                changes.extend(Change("insert", line) for line in b[j1:j2])
        first, last = group[0], group[-1]
        hunks.append(
            Hunk(
                left_start=first[1],
                left_count=last[2] - first[1],
                right_start=first[3],
                right_count=last[4] - first[3],
                changes=changes,
            )
        )
    return hunks


def resolve_conflicts(name: str, left: str, right: str, choose: Chooser) -> str:
    """Merge *left* and *right* by asking *choose* about every hunk.

    With no differing lines *left* is returned as is and *choose* is never
    called. Exceptions raised by *choose* propagate untouched.
    """
    hunks = build_hunks(left, right)
    if not hunks:
        return left

    logger.debug("Skill %s: %d conflicting hunk(s)", name, len(hunks))
    a = split_lines_keepends(left)
    pieces: list[str] = []
    position = 0
    for hunk in hunks:
        pieces.extend(a[position : hunk.left_start])
        choice = choose(name, hunk)
        logger.debug("Skill %s: hunk at line %d -> %s", name, hunk.left_start + 1, choice.value)
        pieces.append(hunk.resolve(choice))
        position = hunk.left_start + hunk.left_count
    pieces.extend(a[position:])
    return "".join(pieces)
