"""prime-agent: keep an AGENTS.md document and a skills directory in sync."""

__version__ = "0.1.0"
