"""Command line and interactive REPL for table animation scripts."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Sequence

from table_animator.actions import EMPTY_HIGHLIGHT, Frame
from table_animator.compiler import CompiledScript, compile_script
from table_animator.model import IdFactory, Table, counter_ids, load_tables, new_id
from table_animator.render import format_frame, format_table, frames_to_json
from table_animator.sequencer import build_frames

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def print_frames(frames: Sequence[Frame], start: int = 0) -> None:
    """Print frames from ``start`` onward as text grids."""
    for i in range(start, len(frames)):
        print(format_frame(frames[i], i, len(frames)))
        print()


def run_script(
    script: str,
    tables: list[Table],
    verbose: bool = False,
    as_json: bool = False,
    frame_delay: int | None = None,
    id_factory: IdFactory = new_id,
) -> int:
    """Compile a script, build its frames and print them.

    Returns:
        0 on success, 1 when the script yields no actions
    """
    result = compile_script(script, tables)
    if result.is_empty_script:
        print("No commands found in script", file=sys.stderr)
        return 1
    if not result.has_actions:
        print("No valid actions found in script", file=sys.stderr)
        return 1

    if verbose:
        _print_summary(result)

    frames = build_frames(tables, result.actions, id_factory)
    if as_json:
        print(frames_to_json(frames, frame_delay))
    else:
        if frame_delay is not None:
            print(f"Frame delay: {frame_delay}ms\n")
        print_frames(frames)
    return 0


def _print_summary(result: CompiledScript) -> None:
    skipped = len(result.errors)
    print(
        f"{len(result.actions)} action{'s' if len(result.actions) != 1 else ''} "
        f"from {result.command_count} command{'s' if result.command_count != 1 else ''}"
        + (f", {skipped} skipped" if skipped else "")
    )
    for action in result.actions:
        print(f"  {action}")
    print()


def run_file(
    file_path: Path,
    tables: list[Table],
    verbose: bool = False,
    as_json: bool = False,
    frame_delay: int | None = None,
    id_factory: IdFactory = new_id,
) -> int:
    """Run the script stored in a file.

    Returns:
        0 on success, 1 on error
    """
    try:
        script = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1
    return run_script(script, tables, verbose, as_json, frame_delay, id_factory)


def print_help() -> None:
    """Print REPL help."""
    print("""
Commands (end each with ';', or press Enter on an empty line):

  highlight in table 'T' row 1,2            Highlight rows (1-based)
  highlight in table 'T' column 'C'         Highlight a column
  highlight in table 'T' column 'C' row 2   Highlight one cell
  add in table 'T' column 'C' cells [{1-'x'} {3-'y'}]
                                            Add a column, seeding some cells
  add in table 'T' row [{'a'} {'b'}]        Add a row, values in column order
  add in table 'T' row [{'C'-'v'}]          Add a row, values by column name

REPL commands:

  tables     Show the tables as they stand after the script
  frames     Show every frame of the script so far
  script     Show the accepted script
  reset      Forget the script
  help       Show this help
  exit       Quit
""")


def run_repl(tables: list[Table]) -> int:
    """Run the interactive REPL."""
    print("Table animation REPL")
    names = ", ".join(repr(t.name) for t in tables) or "none"
    print(f"Tables: {names}")
    print("Type 'help' for commands, 'exit' to quit.\n")

    accepted: list[str] = []
    buffer: list[str] = []

    def current_frames() -> list[Frame]:
        script = ";\n".join(accepted)
        return build_frames(tables, compile_script(script, tables).actions)

    while True:
        try:
            line = input("tanim> " if not buffer else "   ... ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print()
            buffer = []
            continue

        stripped = line.strip()
        if not buffer:
            word = stripped.rstrip(";").lower()
            if word in ("exit", "quit"):
                break
            if word == "help":
                print_help()
                continue
            if word == "reset":
                accepted = []
                print("Script cleared.")
                continue
            if word == "script":
                print(";\n".join(accepted) + ";" if accepted else "(empty script)")
                continue
            if word == "frames":
                print_frames(current_frames())
                continue
            if word == "tables":
                final = current_frames()[-1]
                for table in final.tables:
                    print(format_table(table, EMPTY_HIGHLIGHT))
                    print()
                continue
            if not stripped:
                continue

        if stripped:
            buffer.append(line)
            if not stripped.endswith(";"):
                continue

        text = "\n".join(buffer).strip().rstrip(";")
        buffer = []
        if not text:
            continue

        before = compile_script(";\n".join(accepted), tables).actions
        candidate = accepted + [text]
        result = compile_script(";\n".join(candidate), tables)
        if len(result.actions) == len(before):
            # Diagnostics have already been logged by the compiler
            print("Command skipped.")
            continue

        accepted = candidate
        frames = build_frames(tables, result.actions)
        print_frames(frames, start=len(frames) - (len(result.actions) - len(before)))

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Compile table animation scripts into frames"
    )
    arg_parser.add_argument(
        "tables",
        type=Path,
        help="Path to a JSON file holding the table collection",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Run a script given on the command line and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Run the script in a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print the compiled actions before the frames",
    )
    arg_parser.add_argument(
        "--json",
        action="store_true",
        help="Print frames as JSON instead of text",
    )
    arg_parser.add_argument(
        "--delay",
        type=int,
        default=None,
        help="Frame delay in milliseconds, passed through to the output",
    )
    arg_parser.add_argument(
        "--stable-ids",
        action="store_true",
        help="Generate sequential ids for new rows and columns",
    )
    arg_parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level for diagnostics (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.tables.exists():
        print(f"Error: Tables file not found: {args.tables}", file=sys.stderr)
        return 1
    try:
        tables = load_tables(args.tables)
    except (OSError, ValueError) as e:
        print(f"Error loading tables: {e}", file=sys.stderr)
        return 1
    logger.info("Loaded %d tables from %s", len(tables), args.tables)

    id_factory = counter_ids("new") if args.stable_ids else new_id

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        return run_file(args.file, tables, args.verbose, args.json, args.delay, id_factory)

    if args.command:
        return run_script(args.command, tables, args.verbose, args.json, args.delay, id_factory)

    return run_repl(tables)


if __name__ == "__main__":
    sys.exit(main())
