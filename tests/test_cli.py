"""End-to-end tests for the command-line entry point."""

from __future__ import annotations

import io
import json

import pytest
from pathlib import Path

from prime_agent import config as config_mod
from prime_agent.__main__ import main
from prime_agent.document.model import AgentsDoc, end_marker, start_marker
from prime_agent.skills.store import SkillsStore


def section_text(name: str, *content: str) -> str:
    return "\n".join([start_marker(name), f"## {name}", *content, end_marker(name)])


@pytest.fixture
def env(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("PRIME_AGENT_AGENTS_PATH", raising=False)
    monkeypatch.delenv("PRIME_AGENT_LOG_LEVEL", raising=False)
    monkeypatch.setenv("PRIME_AGENT_SKILLS_DIR", str(tmp_path / "skills"))
    return tmp_path


@pytest.fixture
def store(env: Path) -> SkillsStore:
    return SkillsStore(env / "skills")


def run(*argv: str) -> int:
    return main(list(argv))


class TestGet:
    def test_writes_requested_sections(self, env: Path, store: SkillsStore):
        store.save_skill("a", "one\n")
        store.save_skill("b", "two")
        assert run("get", "b,a", "b") == 0
        text = (env / "AGENTS.md").read_text(encoding="utf-8")
        assert text == section_text("b", "two") + "\n\n" + section_text("a", "one", "")

    def test_custom_agents_path(self, env: Path, store: SkillsStore):
        store.save_skill("a", "one")
        assert run("--agents-path", "docs/AGENTS.md", "get", "a") == 0
        assert (env / "docs" / "AGENTS.md").exists()

    def test_missing_skill(self, env: Path, store: SkillsStore, caplog):
        assert run("get", "ghost") == 1
        assert "failed to read skill" in caplog.text
        assert not (env / "AGENTS.md").exists()

    def test_invalid_name(self, env: Path, store: SkillsStore, caplog):
        assert run("get", "../etc") == 1
        assert "invalid skill name" in caplog.text

    def test_only_commas(self, env: Path, caplog):
        assert run("get", ",") == 1
        assert "no skill names given" in caplog.text


class TestSet:
    def test_stores_file_content(self, env: Path, store: SkillsStore):
        source = env / "draft.md"
        source.write_bytes(b"draft\r\n")
        assert run("set", "draft", str(source)) == 0
        assert store.load_skill("draft") == "draft\r\n"

    def test_missing_source(self, env: Path, caplog):
        assert run("set", "draft", str(env / "nope.md")) == 1
        assert "failed to read" in caplog.text


class TestList:
    def test_names(self, env: Path, store: SkillsStore, capsys):
        store.save_skill("zeta", "z")
        store.save_skill("alpha", "a")
        assert run("list") == 0
        assert capsys.readouterr().out == "alpha\nzeta\n"

    def test_long(self, env: Path, store: SkillsStore, capsys):
        store.save_skill("review", "---\ndescription: Review code\n---\nBody\n")
        store.save_skill("plain", "Body\n")
        assert run("list", "--long") == 0
        assert capsys.readouterr().out == "plain\nreview\tReview code\n"

    def test_skills_dir_flag(self, env: Path, capsys, monkeypatch):
        monkeypatch.delenv("PRIME_AGENT_SKILLS_DIR")
        SkillsStore(env / "other").save_skill("x", "x")
        assert run("--skills-dir", str(env / "other"), "list") == 0
        assert capsys.readouterr().out == "x\n"

    def test_unconfigured(self, env: Path, monkeypatch, caplog):
        monkeypatch.delenv("PRIME_AGENT_SKILLS_DIR")
        assert run("list") == 1
        assert "skills directory not configured" in caplog.text


class TestSync:
    def test_two_way(self, env: Path, store: SkillsStore, monkeypatch, capsys):
        store.save_skill("gamma", "A\nB\n")
        store.save_skill("beta", "X\n")
        (env / "AGENTS.md").write_text(
            section_text("alpha", "line1", "line2") + "\n" + section_text("gamma", "A", "C", ""),
            encoding="utf-8",
        )
        monkeypatch.setattr("sys.stdin", io.StringIO("a\n"))

        assert run("sync") == 0

        assert store.load_skill("alpha") == "line1\nline2"
        assert store.load_skill("gamma") == "A\nC\n"
        doc = AgentsDoc.parse((env / "AGENTS.md").read_text(encoding="utf-8"))
        assert doc.section_names() == ["alpha", "gamma", "beta"]
        out = capsys.readouterr().out
        assert "Conflict in skill 'gamma':" in out
        assert "conflicts resolved: gamma" in out

    def test_stdin_closed(self, env: Path, store: SkillsStore, monkeypatch, caplog):
        store.save_skill("gamma", "A\nB\n")
        original = section_text("gamma", "A", "C", "")
        (env / "AGENTS.md").write_text(original, encoding="utf-8")
        monkeypatch.setattr("sys.stdin", io.StringIO(""))

        assert run("sync") == 1
        assert "stdin closed" in caplog.text
        assert store.load_skill("gamma") == "A\nB\n"
        assert (env / "AGENTS.md").read_text(encoding="utf-8") == original

    def test_malformed_document(self, env: Path, store: SkillsStore, caplog):
        (env / "AGENTS.md").write_text(start_marker("delta"), encoding="utf-8")
        assert run("sync") == 1
        assert "missing section header" in caplog.text
        assert store.list_skill_names() == []


class TestDelete:
    def test_delete_section_only(self, env: Path, store: SkillsStore):
        store.save_skill("a", "x")
        agents = env / "AGENTS.md"
        agents.write_text("Top\n" + section_text("a", "x") + "\nBottom\n", encoding="utf-8")
        assert run("delete", "a") == 0
        assert agents.read_text(encoding="utf-8") == "Top\nBottom\n"
        assert store.skill_exists("a")

    def test_delete_globally(self, env: Path, store: SkillsStore):
        store.save_skill("a", "x")
        agents = env / "AGENTS.md"
        agents.write_text(section_text("a", "x"), encoding="utf-8")
        assert run("delete-globally", "a") == 0
        assert agents.read_text(encoding="utf-8") == ""
        assert not store.skill_exists("a")

    def test_missing_section_leaves_file(self, env: Path, store: SkillsStore, caplog):
        agents = env / "AGENTS.md"
        agents.write_text("Top\n", encoding="utf-8")
        mtime = agents.stat().st_mtime_ns
        assert run("delete", "a") == 0
        assert agents.stat().st_mtime_ns == mtime
        assert "No section 'a'" in caplog.text

    def test_missing_document(self, env: Path, store: SkillsStore):
        store.save_skill("a", "x")
        assert run("delete-globally", "a") == 0
        assert not (env / "AGENTS.md").exists()
        assert not store.skill_exists("a")


class TestConfigCommand:
    def test_show_creates_file(self, env: Path, capsys):
        assert run("config") == 0
        assert capsys.readouterr().out == "Required:\nskills-dir=<missing>\nOptional:\n"
        assert config_mod.config_path().exists()

    def test_set_then_get(self, env: Path, capsys):
        assert run("config", "set", "skills-dir", "~/skills") == 0
        out = capsys.readouterr().out
        assert f"skills-dir={env / 'home' / 'skills'} (updated)" in out

        assert run("config", "set", "editor", "vim") == 0
        out = capsys.readouterr().out
        assert "editor=vim (updated)" in out
        assert f"skills-dir={env / 'home' / 'skills'}\n" in out

        assert run("config", "get", "editor") == 0
        assert capsys.readouterr().out == "vim\n"
        data = json.loads(config_mod.config_path().read_text(encoding="utf-8"))
        assert data == {"skills-dir": str(env / "home" / "skills"), "editor": "vim"}

    def test_get_unknown(self, env: Path, caplog):
        assert run("config", "get", "nope") == 1
        assert "config value 'nope' not found" in caplog.text

    def test_config_used_for_skills_dir(self, env: Path, monkeypatch, capsys):
        monkeypatch.delenv("PRIME_AGENT_SKILLS_DIR")
        SkillsStore(env / "configured").save_skill("s", "x")
        assert run("config", "set", "skills-dir", str(env / "configured")) == 0
        capsys.readouterr()
        assert run("list") == 0
        assert capsys.readouterr().out == "s\n"

    def test_bad_override(self, env: Path, caplog):
        assert run("--config", "nocolon", "list") == 1
        assert "expected key:value" in caplog.text
