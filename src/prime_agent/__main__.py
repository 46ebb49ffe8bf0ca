"""Entry point: prime-agent [options] COMMAND

- get SKILL...           Write the named skills into a fresh AGENTS document
- set NAME PATH          Store a skill from a file
- sync                   Two-way sync between skills and the AGENTS document
- list [--long]          List stored skills
- delete NAME            Remove a section from the AGENTS document
- delete-globally NAME   Remove the section and the stored skill
- config [get|set]       Show or edit the user configuration
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from prime_agent import __version__, commands
from prime_agent.config import load_settings, parse_config_overrides
from prime_agent.document.file import AgentsFile
from prime_agent.errors import PrimeAgentError
from prime_agent.skills.store import SkillsStore

logger = logging.getLogger("prime_agent")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prime-agent",
        description="Keep AGENTS.md and a skills directory in sync.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--skills-dir", type=Path, help="Skills directory")
    parser.add_argument("--agents-path", type=Path, help="AGENTS document (default: AGENTS.md)")
    parser.add_argument(
        "--config",
        dest="config_overrides",
        action="append",
        default=[],
        metavar="KEY:VALUE",
        help="Override a config value for this run (repeatable)",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")

    sub = parser.add_subparsers(dest="command", required=True)

    p_get = sub.add_parser("get", help="Write skills into a fresh AGENTS document")
    p_get.add_argument("skills", nargs="+", help="Skill names, space or comma separated")

    p_set = sub.add_parser("set", help="Store a skill from a file")
    p_set.add_argument("name")
    p_set.add_argument("path", type=Path)

    sub.add_parser("sync", help="Sync skills and the AGENTS document both ways")

    p_list = sub.add_parser("list", help="List stored skills")
    p_list.add_argument("-l", "--long", action="store_true", help="Show descriptions")

    p_delete = sub.add_parser("delete", help="Remove a section from the AGENTS document")
    p_delete.add_argument("name")

    p_delete_all = sub.add_parser(
        "delete-globally", help="Remove a section and delete the stored skill"
    )
    p_delete_all.add_argument("name")

    p_config = sub.add_parser("config", help="Show or edit the user configuration")
    config_sub = p_config.add_subparsers(dest="config_action")
    p_config_get = config_sub.add_parser("get", help="Print one value")
    p_config_get.add_argument("name")
    p_config_set = config_sub.add_parser("set", help="Persist one value")
    p_config_set.add_argument("name")
    p_config_set.add_argument("value")

    return parser


def run(args: argparse.Namespace) -> None:
    overrides = parse_config_overrides(args.config_overrides)

    if args.command == "config":
        commands.config_command(
            args.config_action,
            name=getattr(args, "name", None),
            value=getattr(args, "value", None),
        )
        return

    settings = load_settings(
        skills_dir=args.skills_dir,
        agents_path=args.agents_path,
        log_level=args.log_level,
        overrides=overrides,
    )
    _setup_logging(settings.log_level)

    store = SkillsStore(settings.require_skills_dir())
    agents_file = AgentsFile(settings.agents_path)

    if args.command == "get":
        commands.get_skills(store, agents_file, args.skills)
    elif args.command == "set":
        commands.set_skill(store, args.name, args.path)
    elif args.command == "sync":
        commands.sync(store, agents_file)
    elif args.command == "list":
        commands.list_skills(store, long=args.long)
    elif args.command == "delete":
        commands.delete_section(agents_file, args.name)
    elif args.command == "delete-globally":
        commands.delete_section(agents_file, args.name, store=store)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except PrimeAgentError as e:
        _setup_logging("WARNING")
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
