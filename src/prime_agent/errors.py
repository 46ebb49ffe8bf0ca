"""Exception hierarchy shared by the CLI and the sync core."""

from __future__ import annotations


class PrimeAgentError(Exception):
    """Base class for every error the CLI reports to the user."""


class FormatError(PrimeAgentError):
    """AGENTS document has malformed section delimiters."""


class ValidationError(PrimeAgentError):
    """A skill name (or argument list) is not acceptable."""


class StorageError(PrimeAgentError):
    """Reading or writing the document or a skill file failed."""


class ConfigError(PrimeAgentError):
    """Configuration is missing, unreadable or malformed."""
