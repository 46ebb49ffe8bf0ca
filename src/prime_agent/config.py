"""Configuration: the user config file, prime-agent.toml and environment.

The user config is a JSON object edited through ``prime-agent config``.
A ``prime-agent.toml`` in the current directory can pin per-project values.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from prime_agent.errors import ConfigError

logger = logging.getLogger(__name__)

APP_NAME = "prime-agent"
SKILLS_DIR_KEY = "skills-dir"
PROJECT_FILENAME = "prime-agent.toml"
DEFAULT_AGENTS_PATH = Path("AGENTS.md")
DEFAULT_LOG_LEVEL = "WARNING"


def expand_path(path: Path | str) -> Path:
    """Expand a leading ``~`` and any ``$HOME`` when HOME is set."""
    raw = str(path)
    home = os.environ.get("HOME")
    if home is None:
        return Path(raw)
    if raw == "~" or raw.startswith("~/"):
        return Path(home) / raw[1:].lstrip("/")
    if "$HOME" in raw:
        return Path(raw.replace("$HOME", home))
    return Path(raw)


def config_path() -> Path:
    """Location of the user config file for this platform."""
    if sys.platform == "win32":
        raise ConfigError("Windows is not supported")
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME / "config"
    home = os.environ.get("HOME")
    if home:
        if sys.platform == "darwin":
            return Path(home) / "Library" / "Application Support" / APP_NAME / "config"
        return Path(home) / ".config" / APP_NAME / "config"
    raise ConfigError("HOME not set and XDG_CONFIG_HOME not set")


@dataclass
class Config:
    """Persisted user configuration.

    ``skills-dir`` is the only key the tool itself reads; any other keys are
    kept and written back untouched.
    """

    skills_dir: Path | None = None
    values: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load_required(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"config file missing at '{path}'")
        return cls.load_from_path(path)

    @classmethod
    def load_from_path(cls, path: Path) -> Config:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"failed to read config '{path}': {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"failed to parse config '{path}': {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"failed to parse config '{path}': expected a JSON object")

        skills_dir = data.pop(SKILLS_DIR_KEY, None)
        return cls(
            skills_dir=Path(skills_dir) if skills_dir else None,
            values={str(k): str(v) for k, v in data.items()},
        )

    @classmethod
    def load_or_default(cls, path: Path) -> Config:
        if path.exists():
            return cls.load_from_path(path)
        return cls()

    def save_to_path(self, path: Path) -> None:
        data: dict[str, str] = {}
        if self.skills_dir is not None:
            data[SKILLS_DIR_KEY] = str(self.skills_dir)
        data.update(self.values)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"failed to write config '{path}': {e}") from e
        logger.info("Saved config to %s", path)

    def resolved_skills_dir(self) -> Path | None:
        return expand_path(self.skills_dir) if self.skills_dir else None

    def set_value(self, name: str, value: str) -> None:
        if name == SKILLS_DIR_KEY:
            self.skills_dir = expand_path(value)
        else:
            self.values[name] = value

    def get_value(self, name: str) -> str | None:
        if name == SKILLS_DIR_KEY:
            return str(self.skills_dir) if self.skills_dir else None
        return self.values.get(name)

    def all_values(self) -> dict[str, str]:
        """Every key, sorted by name."""
        merged = dict(self.values)
        if self.skills_dir is not None:
            merged[SKILLS_DIR_KEY] = str(self.skills_dir)
        return dict(sorted(merged.items()))

    def apply_overrides(self, overrides: dict[str, str]) -> None:
        for key, value in overrides.items():
            self.set_value(key, value)


def ensure_config_file(path: Path) -> None:
    """Create an empty config file if there is none yet."""
    if not path.exists():
        Config().save_to_path(path)


def parse_config_overrides(values: list[str]) -> dict[str, str]:
    """Parse ``--config key:value`` arguments."""
    overrides: dict[str, str] = {}
    for value in values:
        key, sep, raw_value = value.partition(":")
        if not sep:
            raise ConfigError(f"invalid --config value '{value}', expected key:value")
        key = key.strip()
        if not key:
            raise ConfigError(f"invalid --config value '{value}', empty key")
        if key == SKILLS_DIR_KEY:
            raw_value = str(expand_path(raw_value))
        overrides[key] = raw_value
    return overrides


def load_project_file(directory: Path | None = None) -> dict:
    """Read ``prime-agent.toml`` from *directory* (default: cwd), if present."""
    path = (directory or Path.cwd()) / PROJECT_FILENAME
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"failed to parse '{path}': {e}") from e


@dataclass
class Settings:
    """Values for a single invocation, resolved once at startup."""

    skills_dir: Path | None = None
    agents_path: Path = DEFAULT_AGENTS_PATH
    log_level: str = DEFAULT_LOG_LEVEL

    def require_skills_dir(self) -> Path:
        if self.skills_dir is None:
            raise ConfigError(
                "skills directory not configured; use --skills-dir, "
                "PRIME_AGENT_SKILLS_DIR or 'prime-agent config set skills-dir <path>'"
            )
        return self.skills_dir


def load_settings(
    *,
    skills_dir: Path | None = None,
    agents_path: Path | None = None,
    log_level: str | None = None,
    overrides: dict[str, str] | None = None,
    user_config_path: Path | None = None,
    project_dir: Path | None = None,
) -> Settings:
    """Resolve settings.

    Priority: --config override > command-line flag > environment >
    user config file > prime-agent.toml > defaults. The user config is
    only consulted when the skills directory is still unknown.
    """
    overrides = overrides or {}
    project = load_project_file(project_dir)

    resolved_skills: Path | None = None
    if SKILLS_DIR_KEY in overrides:
        resolved_skills = Path(overrides[SKILLS_DIR_KEY])
    elif skills_dir is not None:
        resolved_skills = expand_path(skills_dir)
    elif os.environ.get("PRIME_AGENT_SKILLS_DIR"):
        resolved_skills = expand_path(os.environ["PRIME_AGENT_SKILLS_DIR"])
    else:
        path = user_config_path or config_path()
        config = Config.load_required(path) if path.exists() else Config()
        config.apply_overrides(overrides)
        resolved_skills = config.resolved_skills_dir()
        if resolved_skills is None and project.get(SKILLS_DIR_KEY):
            resolved_skills = expand_path(project[SKILLS_DIR_KEY])

    if agents_path is None:
        agents_path = Path(
            os.getenv("PRIME_AGENT_AGENTS_PATH")
            or project.get("agents-path")
            or DEFAULT_AGENTS_PATH
        )

    level = (
        log_level
        or os.getenv("PRIME_AGENT_LOG_LEVEL")
        or project.get("log-level")
        or DEFAULT_LOG_LEVEL
    )

    settings = Settings(
        skills_dir=resolved_skills,
        agents_path=expand_path(agents_path),
        log_level=str(level).upper(),
    )
    logger.debug("Resolved settings: %s", settings)
    return settings
