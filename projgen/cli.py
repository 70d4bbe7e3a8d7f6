"""CLI entrypoints for projgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .flags import GenerationSettings, flag_names, parse_flag_name
from .logging import configure_logging
from .orchestrator import ProjectGeneration
from .provider import ManifestError
from .stores import SettingsStore


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root holding .projgen.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projgen",
        description="Generate solution and project files for IDEs from a compilation manifest.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser(
        "sync",
        help="Regenerate the solution and every project file.",
    )
    _add_verbose_option(sync_parser, suppress_default=True)
    _add_path_argument(sync_parser)

    update_parser = subparsers.add_parser(
        "update",
        help="Regenerate only what the changed asset paths touch.",
    )
    _add_verbose_option(update_parser, suppress_default=True)
    _add_path_argument(update_parser)
    update_parser.add_argument(
        "--affected",
        nargs="*",
        default=[],
        metavar="PATH",
        help="Asset paths that were added, changed or moved.",
    )
    update_parser.add_argument(
        "--reimported",
        nargs="*",
        default=[],
        metavar="PATH",
        help="Asset paths that were reimported.",
    )

    flags_parser = subparsers.add_parser(
        "flags",
        help="Show or toggle which package origins are generated.",
    )
    _add_verbose_option(flags_parser, suppress_default=True)
    _add_path_argument(flags_parser)
    flags_parser.add_argument(
        "--toggle",
        action="append",
        default=[],
        metavar="NAME",
        help="Flip a generation flag (e.g. registry, git, player). Repeatable.",
    )
    flags_parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear every generation flag before applying toggles.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _load_settings(path: str) -> GenerationSettings:
    config = load_config(Path(path))
    return GenerationSettings(SettingsStore(config.settings_path), default=config.default_flags)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    if args.command == "flags":
        try:
            settings = _load_settings(args.path)
            toggles = [parse_flag_name(name) for name in args.toggle]
        except (ConfigError, ValueError) as exc:
            parser.exit(1, f"{exc}\n")
        if args.reset:
            settings.reset()
        for flag in toggles:
            settings.toggle(flag)
        names = flag_names(settings.flags)
        print("Generation flags: " + (", ".join(names) if names else "none"))
        return

    try:
        generation = ProjectGeneration.from_config(load_config(Path(args.path)))
    except (ConfigError, ManifestError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "sync":
        try:
            generation.sync()
        except OSError as exc:
            parser.exit(1, f"projgen sync failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Solution synced at {_relativize(Path(generation.solution_file()))}")
    elif args.command == "update":
        try:
            changed = generation.sync_if_needed(args.affected, args.reimported)
        except OSError as exc:
            parser.exit(1, f"projgen update failed: {exc}\nRun with --verbose for more details.\n")
        if changed:
            print(f"Solution updated at {_relativize(Path(generation.solution_file()))}")
        else:
            print("Projects already up to date")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
