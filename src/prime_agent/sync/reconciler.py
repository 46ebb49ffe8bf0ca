"""Reconcile every known skill name between the store and the document.

For each name, in ascending order:

- section only        → write the skill from the section
- skill only          → add a section from the skill
- both, same content  → nothing (CRLF and trailing newlines ignored)
- both, different     → resolve hunk by hunk, write the result to both

Skill writes happen as each name is processed. The document is written
once at the end, and only when its text changed or a skill was written.
A failure stops the sync; skills already written stay written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from prime_agent.document.model import AgentSection, AgentsDoc
from prime_agent.skills.store import validate_name
from prime_agent.sync.merge import Chooser, contents_match, resolve_conflicts

if TYPE_CHECKING:
    from prime_agent.document.file import AgentsFile
    from prime_agent.skills.store import SkillsStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """What a sync changed, names in processing order."""

    created_skills: list[str] = field(default_factory=list)
    created_sections: list[str] = field(default_factory=list)
    resolved: list[str] = field(default_factory=list)
    document_written: bool = False

    @property
    def wrote_any(self) -> bool:
        return bool(self.created_skills or self.created_sections or self.resolved)

    def summary(self) -> str:
        if not self.wrote_any and not self.document_written:
            return "Already in sync."
        parts = []
        if self.created_skills:
            parts.append(f"skills created: {', '.join(self.created_skills)}")
        if self.created_sections:
            parts.append(f"sections added: {', '.join(self.created_sections)}")
        if self.resolved:
            parts.append(f"conflicts resolved: {', '.join(self.resolved)}")
        if not parts:
            parts.append("document rewritten")
        return "; ".join(parts)


def sync_documents(doc: AgentsDoc, store: SkillsStore, choose: Chooser) -> SyncResult:
    """Reconcile *doc* (in memory) with *store* (on disk, written immediately)."""
    result = SyncResult()
    all_names = set(doc.section_names()) | set(store.list_skill_names())

    for name in sorted(all_names):
        validate_name(name)
        skill_exists = store.skill_exists(name)
        section = doc.get_section(name)

        if section is not None and not skill_exists:
            logger.info("Creating skill %s from AGENTS section", name)
            store.save_skill(name, section.content_string())
            result.created_skills.append(name)
        elif section is None and skill_exists:
            logger.info("Adding AGENTS section for skill %s", name)
            content = store.load_skill(name)
            doc.upsert_section(AgentSection.from_content(name, content))
            result.created_sections.append(name)
        elif section is not None:
            skill_content = store.load_skill(name)
            agents_content = section.content_string()
            if contents_match(skill_content, agents_content):
                logger.debug("Skill %s already in sync", name)
                continue
            resolved = resolve_conflicts(name, skill_content, agents_content, choose)
            store.save_skill(name, resolved)
            doc.upsert_section(AgentSection.from_content(name, resolved))
            result.resolved.append(name)
            logger.info("Resolved conflict for skill %s", name)

    return result


def run_sync(store: SkillsStore, agents_file: AgentsFile, choose: Chooser) -> SyncResult:
    """Read and parse the document, sync it, write it back if needed.

    A parse failure raises before anything is written.
    """
    doc, original = agents_file.load()
    result = sync_documents(doc, store, choose)

    rendered = doc.render()
    if result.wrote_any or original != rendered:
        agents_file.write(rendered)
        result.document_written = True
    else:
        logger.debug("%s unchanged, not rewriting", agents_file.path)
    return result
