"""please CLI: record shell history into reusable scripts."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from typing import List

from please.errors import PleaseError

logger = logging.getLogger(__name__)

COMMANDS = ("run", "build", "ask", "list", "current", "edit", "reset", "delete")
GLOBAL_FLAGS = ("--quiet", "--verbose")


def _build_parser() -> argparse.ArgumentParser:
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        please_version = get_version("please-scripts")
    except PackageNotFoundError:
        please_version = "dev"

    parser = argparse.ArgumentParser(
        prog="please",
        description="please: turn the commands you just typed into a reusable script",
        epilog="`please <name>` is shorthand for `please run <name>`.",
    )
    parser.add_argument("--version", action="version", version=f"please {please_version}")
    # Common arguments, accepted before or after the command name. The
    # subcommand copies use SUPPRESS so they never reset a flag given earlier.
    parent_parser = argparse.ArgumentParser(add_help=False)
    for target, default in ((parser, False), (parent_parser, argparse.SUPPRESS)):
        target.add_argument(
            "--quiet",
            action="store_true",
            default=default,
            help="Suppress all non-error output."
        )
        target.add_argument(
            "--verbose",
            action="store_true",
            default=default,
            help="Log diagnostics to stderr."
        )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run a script",
        parents=[parent_parser]
    )
    run_parser.add_argument("script", help="Name of the script you want to run")
    run_parser.add_argument(
        "script_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the script"
    )

    build_parser = subparsers.add_parser(
        "build",
        help="Start building a script, or finish the current build when no name is given",
        parents=[parent_parser]
    )
    build_parser.add_argument(
        "script",
        nargs="?",
        default=None,
        help="Name of the script you want to create"
    )
    build_parser.add_argument(
        "--force",
        action="store_true",
        help="Replace an existing script with the same name"
    )

    ask_parser = subparsers.add_parser(
        "ask",
        help="Add a prompt to your script",
        parents=[parent_parser]
    )
    ask_parser.add_argument("words", nargs="*", help="Prompt shown when the script asks for input")
    ask_parser.add_argument("--var", dest="variable", default=None, help="Variable name")
    ask_parser.add_argument("--expr", dest="expression", default=None, help="Command using the variable")
    ask_parser.add_argument("--value", default=None, help="Value to use right now")

    subparsers.add_parser("list", help="List created scripts", parents=[parent_parser])
    subparsers.add_parser(
        "current",
        help="Show what the current script looks like",
        parents=[parent_parser]
    )

    edit_parser = subparsers.add_parser(
        "edit",
        help="Open a created script in editor",
        parents=[parent_parser]
    )
    edit_parser.add_argument("script", help="Name of the script")

    subparsers.add_parser("reset", help="Discard the current build", parents=[parent_parser])

    delete_parser = subparsers.add_parser(
        "delete",
        help="Delete a script",
        parents=[parent_parser]
    )
    delete_parser.add_argument("script", help="Name of the script")

    return parser


def _expand_shorthand(argv: List[str]) -> List[str]:
    """Rewrite ``please [flags] <name> ...`` to ``please [flags] run <name> ...``."""
    i = 0
    while i < len(argv) and argv[i] in GLOBAL_FLAGS:
        i += 1
    if i < len(argv) and argv[i] not in COMMANDS and not argv[i].startswith("-"):
        return argv[:i] + ["run"] + argv[i:]
    return argv


def _handle(args) -> int:
    from please import api

    if args.command == "run":
        if not args.quiet:
            print(f"Okay, running `{args.script}` for you!")
        return api.run(args.script, args=args.script_args)

    if args.command == "build" and args.script:
        session = api.start_build(args.script, force=args.force)
        if not args.quiet:
            print(f"[OK] Started building script `{session.script_name}`")
            print("  Run your commands, then `please build` to save them.")
        return 0

    if args.command == "build":
        result = api.finish_build()
        if not args.quiet:
            print(f"[OK] Saved script `{result.script_name}`")
            print(f"  Path: {result.path}")
            print(f"  Lines: {len(result.draft.lines)}")
        return 0

    if args.command == "ask":
        outcome = api.ask(
            " ".join(args.words),
            variable=args.variable,
            expression=args.expression,
            value=args.value,
        )
        if outcome.exit_code not in (None, 0) and not args.quiet:
            print(
                f"  Expression exited with status {outcome.exit_code}; "
                f"it was still added to the script.",
                file=sys.stderr,
            )
        return 0

    if args.command == "list":
        scripts = api.list_scripts()
        if not scripts:
            print("Looks like you don't have any scripts yet!")
            print("You can start creating one with `please build <script name>`")
            return 0
        print("Here are your scripts:")
        for name in scripts:
            print(f"\t{name}")
        return 0

    if args.command == "current":
        draft = api.preview_build()
        if not args.quiet:
            print(f"This is what `{draft.script_name}` looks like so far:\n")
        # Undecodable history bytes are shown as replacement characters.
        print(draft.body.encode("utf-8", "surrogateescape").decode("utf-8", "replace"), end="")
        return 0

    if args.command == "edit":
        return api.edit(args.script)

    if args.command == "reset":
        session = api.reset_build()
        if not args.quiet:
            name = session.script_name if session is not None else "unreadable build"
            print(f"[OK] Discarded `{name}`")
        return 0

    if args.command == "delete":
        api.delete(args.script)
        if not args.quiet:
            print(f"[OK] Deleted script `{args.script}`")
        return 0

    raise AssertionError(f"unhandled command {args.command!r}")


def main():
    """Main CLI entry point for please commands."""
    parser = _build_parser()
    args = parser.parse_args(_expand_shorthand(sys.argv[1:]))

    if not args.command:
        parser.print_help()
        sys.exit(1)

    from please.logging import configure_logging

    configure_logging("DEBUG" if args.verbose else None)

    try:
        exit_code = _handle(args)
    except PleaseError as e:
        logger.debug("Command %s failed with %s", args.command, e.code.value)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        sys.exit(130)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
