"""Lossless parser/renderer for AGENTS documents.

A document is an ordered list of segments: runs of free text, and named
sections bounded by ``prime-agent`` start/end markers. Parsing then
rendering reproduces the input exactly; the raw delimiter lines of every
parsed section are kept so that trailing whitespace or CRLF endings on
them survive the round trip.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Union

from prime_agent.errors import FormatError

logger = logging.getLogger(__name__)

START_PREFIX = "<!-- prime-agent(Start "
END_PREFIX = "<!-- prime-agent(End "
MARKER_SUFFIX = ") -->"


def start_marker(name: str) -> str:
    return f"{START_PREFIX}{name}{MARKER_SUFFIX}"


def end_marker(name: str) -> str:
    return f"{END_PREFIX}{name}{MARKER_SUFFIX}"


def header_line(name: str) -> str:
    return f"## {name}"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` keeping a trailing empty element; ``""`` has no lines.

    ``"\\n".join(split_lines(text)) == text`` holds for every string.
    """
    if not text:
        return []
    return text.split("\n")


def parse_start_marker(line: str) -> str | None:
    """Return the section name if *line* is a start marker."""
    stripped = line.rstrip()
    if len(stripped) < len(START_PREFIX) + len(MARKER_SUFFIX):
        return None
    if not (stripped.startswith(START_PREFIX) and stripped.endswith(MARKER_SUFFIX)):
        return None
    name = stripped[len(START_PREFIX) : -len(MARKER_SUFFIX)].strip()
    return name or None


def is_end_marker(line: str, name: str) -> bool:
    return line.rstrip() == end_marker(name)


@dataclass
class AgentSection:
    """A named block of content embedded in the document."""

    name: str
    content_lines: list[str] = field(default_factory=list)

    @classmethod
    def from_content(cls, name: str, content: str) -> AgentSection:
        return cls(name=name, content_lines=split_lines(content))

    def content_string(self) -> str:
        return "\n".join(self.content_lines)


@dataclass
class _Text:
    lines: list[str]

    def render_lines(self) -> list[str]:
        return self.lines


@dataclass
class _Section:
    section: AgentSection
    # Raw delimiter lines as read from disk; None for sections built in memory.
    start: str | None = None
    header: str | None = None
    end: str | None = None
    # Terminator of the last content line, split off at parse time ("\r" in CRLF files).
    eol: str = ""
    # Written in memory into a CRLF document: every generated line ends with "\r".
    crlf: bool = False

    def render_lines(self) -> list[str]:
        name = self.section.name
        cr = "\r" if self.crlf else ""
        content = list(self.section.content_lines)
        if self.crlf:
            content = [line if line.endswith("\r") else line + "\r" for line in content]
        elif content and self.eol:
            content[-1] += self.eol
        return [
            self.start if self.start is not None else start_marker(name) + cr,
            self.header if self.header is not None else header_line(name) + cr,
            *content,
            self.end if self.end is not None else end_marker(name) + cr,
        ]


Segment = Union[_Text, _Section]


class AgentsDoc:
    """Ordered text/section segments of an AGENTS document.

    A document whose first line ends in CRLF is treated as a CRLF document:
    sections added or replaced in memory are rendered with CRLF endings.
    """

    def __init__(self, segments: list[Segment] | None = None, crlf: bool = False) -> None:
        self._segments: list[Segment] = segments or []
        self.crlf = crlf

    @classmethod
    def empty(cls) -> AgentsDoc:
        return cls()

    # ── Parsing ───────────────────────────────────────────────

    @classmethod
    def parse(cls, text: str, source: str = "<document>") -> AgentsDoc:
        """Parse *text* into segments.

        Raises FormatError when a start marker is not followed by the
        matching ``## name`` header, when its end marker never appears, or
        when two sections share a name. *source* names the document in
        error messages.
        """
        lines = split_lines(text)
        segments: list[Segment] = []
        text_lines: list[str] = []
        seen: set[str] = set()

        index = 0
        while index < len(lines):
            line = lines[index]
            name = parse_start_marker(line)
            if name is None:
                text_lines.append(line)
                index += 1
                continue

            if text_lines:
                segments.append(_Text(text_lines))
                text_lines = []

            start_index = index
            index += 1
            if index >= len(lines):
                raise FormatError(
                    f"{source}:{start_index + 1}: missing section header after "
                    f"start marker for '{name}'"
                )
            header = lines[index]
            expected = header_line(name)
            if header.rstrip() != expected:
                raise FormatError(
                    f"{source}:{index + 1}: expected header '{expected}', "
                    f"found '{header.rstrip()}'"
                )

            index += 1
            content: list[str] = []
            while index < len(lines) and not is_end_marker(lines[index], name):
                content.append(lines[index])
                index += 1
            if index >= len(lines):
                raise FormatError(
                    f"{source}:{start_index + 1}: missing end marker for '{name}'"
                )
            if name in seen:
                raise FormatError(
                    f"{source}:{start_index + 1}: duplicate section '{name}'"
                )
            seen.add(name)

            eol = ""
            if content and content[-1].endswith("\r"):
                content[-1] = content[-1][:-1]
                eol = "\r"
            segments.append(
                _Section(
                    AgentSection(name, content),
                    start=line,
                    header=header,
                    end=lines[index],
                    eol=eol,
                )
            )
            index += 1

        if text_lines:
            segments.append(_Text(text_lines))

        logger.debug("Parsed %s: %d segments, sections=%s", source, len(segments), sorted(seen))
        crlf = len(lines) > 1 and lines[0].endswith("\r")
        return cls(segments, crlf=crlf)

    # ── Lookup ────────────────────────────────────────────────

    def _section_segments(self) -> Iterator[_Section]:
        for segment in self._segments:
            if isinstance(segment, _Section):
                yield segment

    def sections(self) -> list[AgentSection]:
        return [segment.section for segment in self._section_segments()]

    def section_names(self) -> list[str]:
        """Names of all sections, in document order."""
        return [segment.section.name for segment in self._section_segments()]

    def get_section(self, name: str) -> AgentSection | None:
        for segment in self._section_segments():
            if segment.section.name == name:
                return segment.section
        return None

    def __contains__(self, name: object) -> bool:
        return any(segment.section.name == name for segment in self._section_segments())

    # ── Mutation ──────────────────────────────────────────────

    def upsert_section(self, section: AgentSection) -> None:
        """Replace the section with the same name in place, or insert it.

        A new section goes right after the last existing section, or at the
        end of the document when there is none.
        """
        for segment in self._section_segments():
            if segment.section.name == section.name:
                segment.section = section
                segment.eol = ""
                segment.crlf = self.crlf
                return

        last_section = None
        for position, segment in enumerate(self._segments):
            if isinstance(segment, _Section):
                last_section = position
        if last_section is None:
            self._segments.append(_Section(section, crlf=self.crlf))
        else:
            self._segments.insert(last_section + 1, _Section(section, crlf=self.crlf))

    def remove_section(self, name: str) -> bool:
        """Drop the named section; surrounding text is left alone."""
        before = len(self._segments)
        self._segments = [
            segment
            for segment in self._segments
            if not (isinstance(segment, _Section) and segment.section.name == name)
        ]
        return len(self._segments) != before

    # ── Rendering ─────────────────────────────────────────────

    def render(self) -> str:
        lines: list[str] = []
        for segment in self._segments:
            if isinstance(segment, _Section) and segment.crlf and segment.start is None:
                if lines and not lines[-1].endswith("\r"):
                    # The previous last line of the file gains a line ending.
                    lines[-1] += "\r"
            lines.extend(segment.render_lines())
        last = self._segments[-1] if self._segments else None
        if isinstance(last, _Section) and last.end is None and last.crlf:
            # A generated end marker closing the file carries no line ending.
            lines[-1] = lines[-1][:-1]
        return "\n".join(lines)


def render_sections(sections: list[AgentSection]) -> str:
    """Render a fresh document holding only *sections*, one blank line apart."""
    lines: list[str] = []
    for index, section in enumerate(sections):
        if index > 0:
            lines.append("")
        lines.extend(_Section(section).render_lines())
    return "\n".join(lines)
