"""Skills directory.

Layout:
    <skills-dir>/
    ├── review/
    │   └── SKILL.md        # one skill, addressed by its directory name
    └── release-notes/
        └── SKILL.md

Directories without a SKILL.md are ignored.
"""
