"""One function per CLI verb. Argument parsing lives in ``__main__``."""

from __future__ import annotations

import logging
from pathlib import Path

from prime_agent import config as config_mod
from prime_agent.config import SKILLS_DIR_KEY, Config
from prime_agent.document.file import AgentsFile
from prime_agent.document.model import AgentSection, render_sections
from prime_agent.errors import ConfigError, StorageError, ValidationError
from prime_agent.skills.store import SkillsStore, validate_name
from prime_agent.sync.merge import Chooser
from prime_agent.sync.prompt import ConsoleChooser
from prime_agent.sync.reconciler import SyncResult, run_sync

logger = logging.getLogger(__name__)


def expand_skill_args(args: list[str]) -> list[str]:
    """Accept ``a b`` as well as ``a,b``; drop blanks and repeats."""
    names: list[str] = []
    for arg in args:
        for part in arg.split(","):
            name = part.strip()
            if name and name not in names:
                names.append(name)
    if not names:
        raise ValidationError("no skill names given")
    return names


# ── Skills ────────────────────────────────────────────────

def get_skills(store: SkillsStore, agents_file: AgentsFile, skills: list[str]) -> None:
    """Overwrite the document with sections for the requested skills."""
    sections = []
    for name in expand_skill_args(skills):
        validate_name(name)
        sections.append(AgentSection.from_content(name, store.load_skill(name)))
    agents_file.write(render_sections(sections))
    print(f"Wrote {len(sections)} skill(s) to {agents_file.path}")


def set_skill(store: SkillsStore, name: str, path: Path) -> None:
    validate_name(name)
    try:
        with path.open(encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"failed to read '{path}': {e}") from e
    store.save_skill(name, content)


def list_skills(store: SkillsStore, long: bool = False) -> None:
    for name in store.list_skill_names():
        if long:
            description = store.skill_metadata(name).get("description", "")
            print(f"{name}\t{description}".rstrip())
        else:
            print(name)


def sync(store: SkillsStore, agents_file: AgentsFile, choose: Chooser | None = None) -> SyncResult:
    result = run_sync(store, agents_file, choose or ConsoleChooser())
    print(result.summary())
    return result


def delete_section(
    agents_file: AgentsFile, name: str, store: SkillsStore | None = None
) -> bool:
    """Remove a section from the document; with *store*, delete the skill too."""
    validate_name(name)
    doc, _ = agents_file.load()
    removed = doc.remove_section(name)
    if removed:
        agents_file.write(doc.render())
    elif agents_file.exists():
        logger.warning("No section '%s' in %s", name, agents_file.path)
    else:
        logger.warning("%s does not exist", agents_file.path)

    if store is not None:
        store.delete_skill(name)
    return removed


# ── Config ────────────────────────────────────────────────

def _print_config(config: Config, updated_key: str | None = None) -> None:
    def mark(key: str) -> str:
        return " (updated)" if key == updated_key else ""

    values = config.all_values()
    print("Required:")
    print(f"{SKILLS_DIR_KEY}={values.get(SKILLS_DIR_KEY, '<missing>')}{mark(SKILLS_DIR_KEY)}")
    print("Optional:")
    for key, value in values.items():
        if key == SKILLS_DIR_KEY:
            continue
        print(f"{key}={value}{mark(key)}")


def config_command(
    action: str | None,
    name: str | None = None,
    value: str | None = None,
    path: Path | None = None,
) -> None:
    """``config``, ``config get NAME`` or ``config set NAME VALUE``."""
    path = path or config_mod.config_path()
    config_mod.ensure_config_file(path)

    if action == "set":
        config = Config.load_or_default(path)
        config.set_value(name, value)
        config.save_to_path(path)
        _print_config(config, updated_key=name)
    elif action == "get":
        config = Config.load_required(path)
        found = config.get_value(name)
        if found is None:
            raise ConfigError(f"config value '{name}' not found")
        print(found)
    else:
        _print_config(Config.load_required(path))
