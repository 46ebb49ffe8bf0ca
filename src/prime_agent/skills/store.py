"""Skill store: one directory per skill, content in ``<name>/SKILL.md``.

The files are the source of truth; nothing is cached between calls.
Frontmatter is only read for display, sync always works on raw text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import frontmatter

from prime_agent.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"

_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")


def validate_name(name: str) -> None:
    """Raise ValidationError unless *name* is non-empty ASCII alnum, '-' or '_'."""
    if not name:
        raise ValidationError("skill name cannot be empty")
    if not _NAME_RE.fullmatch(name):
        raise ValidationError(
            f"invalid skill name '{name}': must be alphanumeric, '-' or '_'"
        )


class SkillsStore:
    """Read/write access to a skills directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def skill_path(self, name: str) -> Path:
        return self.root / name / SKILL_FILENAME

    def skill_exists(self, name: str) -> bool:
        return self.skill_path(name).exists()

    def list_skill_names(self) -> list[str]:
        """Sorted names of sub-directories that contain a SKILL.md."""
        if not self.root.exists():
            return []
        try:
            entries = list(self.root.iterdir())
        except OSError as e:
            raise StorageError(f"failed to read skills dir '{self.root}': {e}") from e
        names = [
            entry.name
            for entry in entries
            if entry.is_dir() and (entry / SKILL_FILENAME).exists()
        ]
        return sorted(names)

    def load_skill(self, name: str) -> str:
        path = self.skill_path(name)
        try:
            with path.open(encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"failed to read skill '{path}': {e}") from e

    def save_skill(self, name: str, content: str) -> None:
        path = self.skill_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"failed to create skill dir '{path.parent}': {e}") from e
        try:
            with path.open("w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"failed to write skill '{path}': {e}") from e
        logger.info("Saved skill %s (%d chars)", name, len(content))

    def delete_skill(self, name: str) -> None:
        """Remove the skill file; a missing skill is not an error."""
        path = self.skill_path(name)
        if not path.exists():
            logger.debug("Skill %s already absent", name)
            return
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"failed to delete skill '{path}': {e}") from e
        logger.info("Deleted skill %s", name)

    def skill_metadata(self, name: str) -> dict:
        """YAML frontmatter of the skill file, ``{}`` if absent or malformed."""
        try:
            post = frontmatter.load(str(self.skill_path(name)))
            return dict(post.metadata)
        except Exception as e:
            logger.debug("No usable frontmatter for skill %s: %s", name, e)
            return {}
