"""Backing file for the AGENTS document."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from prime_agent.document.model import AgentsDoc
from prime_agent.errors import StorageError

logger = logging.getLogger(__name__)


class AgentsFile:
    """Reads and atomically rewrites the document at *path*.

    Text is read and written with newline translation disabled so CRLF
    documents are preserved byte for byte.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> str | None:
        """Full text of the document, or None when the file does not exist."""
        if not self.path.exists():
            return None
        try:
            with self.path.open(encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"failed to read '{self.path}': {e}") from e

    def load(self) -> tuple[AgentsDoc, str | None]:
        """Parse the document; a missing file is an empty document."""
        text = self.read()
        if text is None:
            logger.debug("%s does not exist, starting from an empty document", self.path)
            return AgentsDoc.empty(), None
        return AgentsDoc.parse(text, source=str(self.path)), text

    def write(self, text: str) -> None:
        """Replace the document with *text* via a temp file and rename.

        A symlinked document is written through to its target.
        """
        target = self.path.resolve()
        parent = target.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=parent, prefix=f".{target.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(f"failed to write '{self.path}': {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            # mkstemp creates 0600 files; keep the mode the document already had.
            mode = target.stat().st_mode & 0o777 if target.exists() else 0o644
            tmp_path.chmod(mode)
            tmp_path.replace(target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"failed to write '{self.path}': {e}") from e
        logger.info("Wrote %s (%d chars)", self.path, len(text))
