"""retrace CLI entry point.

Runs a script of history commands against JSON state values and prints the
resulting history after each command.

Usage:
    python -m retrace session.txt                   # Run a command script
    python -m retrace - < session.txt               # Read commands from stdin
    python -m retrace --max-size 5 session.txt      # Bound the past
    python -m retrace --config config/default.yaml --quiet session.txt

Script commands (one per line, ``#`` starts a comment):
    set <json>          Replace the present state
    merge <json-obj>    Merge keys into a dict state as one undoable step
    undo / redo         Step backward / forward
    clear               Return to the initial state, forgetting history
    snapshot <name>     Remember the whole history under <name>
    restore <name>      Put a remembered history back
    show                Print the history (also in --quiet mode)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable
from typing import Any, TextIO

from omegaconf import OmegaConf

from retrace.binding.state import StateBinding
from retrace.core.config import RetraceConfig
from retrace.history.config import HistoryConfig
from retrace.history.equality import EQUALITY_PREDICATES
from retrace.history.snapshot import HistorySnapshot
from retrace.utils.logging import setup_logging

logger = logging.getLogger("retrace.cli")

COMMANDS = ("set", "merge", "undo", "redo", "clear", "snapshot", "restore", "show")


class ScriptError(ValueError):
    """A script line could not be executed."""

    def __init__(self, line_no: int, msg: str):
        super().__init__(f"line {line_no}: {msg}")
        self.line_no = line_no


def _parse_json(line_no: int, text: str) -> Any:
    if not text:
        raise ScriptError(line_no, "missing JSON argument")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ScriptError(line_no, f"invalid JSON: {e.msg}") from e


def _render(binding: StateBinding, command: str | None = None) -> str:
    payload: dict[str, Any] = {}
    if command is not None:
        payload["command"] = command
    payload.update(binding.snapshot().to_dict())
    payload["can_undo"] = binding.can_undo
    payload["can_redo"] = binding.can_redo
    return json.dumps(payload)


def run_script(
    lines: Iterable[str],
    binding: StateBinding,
    out: TextIO,
    quiet: bool = False,
) -> int:
    """Execute *lines* against *binding*.  Returns the number of commands run.

    Raises :class:`ScriptError` on the first bad line; commands before it
    have already been applied.
    """
    snapshots: dict[str, HistorySnapshot] = {}
    executed = 0

    for line_no, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        command, _, arg = line.partition(" ")
        arg = arg.strip()
        logger.debug("Line %d: %s", line_no, line)

        if command == "set":
            binding.set(_parse_json(line_no, arg))
        elif command == "merge":
            fields = _parse_json(line_no, arg)
            if not isinstance(fields, dict):
                raise ScriptError(line_no, "merge expects a JSON object")
            if not isinstance(binding.state, dict):
                raise ScriptError(line_no, "merge needs a JSON object as state")

            def _merge(state: dict) -> dict:
                state.update(fields)
                return state

            binding.update(_merge)
        elif command == "undo":
            binding.undo()
        elif command == "redo":
            binding.redo()
        elif command == "clear":
            binding.clear()
        elif command == "snapshot":
            if not arg:
                raise ScriptError(line_no, "snapshot needs a name")
            snapshots[arg] = binding.snapshot()
        elif command == "restore":
            try:
                binding.restore(snapshots[arg])
            except KeyError:
                raise ScriptError(line_no, f"unknown snapshot {arg!r}") from None
        elif command == "show":
            print(_render(binding), file=out)
        else:
            raise ScriptError(
                line_no,
                f"unknown command {command!r} (expected one of: {', '.join(COMMANDS)})",
            )

        executed += 1
        if not quiet and command != "show":
            print(_render(binding, command), file=out)

    if quiet:
        print(_render(binding), file=out)
    logger.info(
        "Script finished (%d commands): %s", executed, binding.history.get_status()
    )
    return executed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="retrace",
        description="retrace - bounded undo/redo history over JSON states",
    )
    parser.add_argument(
        "script",
        nargs="?",
        default="-",
        help="Command script to run ('-' or omitted = stdin)",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to configuration YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--initial",
        default="{}",
        help="Initial state as JSON (default: {})",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Override history.max_size (maximum number of past states)",
    )
    parser.add_argument(
        "--equality",
        default=None,
        choices=sorted(EQUALITY_PREDICATES),
        help="Override history.equality",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        default=False,
        help="Only print the final history (and 'show' output)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        default=False,
        help="Validate config against Pydantic schema before starting",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (default: no file logging)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=False,
        help="Output logs as JSON instead of human-readable",
    )
    args = parser.parse_args(argv)

    # Load config
    system: dict[str, Any] = {}
    if args.config is not None:
        config = RetraceConfig(args.config)
        try:
            cfg = config.load(validate=args.validate_config)
        except FileNotFoundError:
            print(f"Error: Config file not found: {args.config}", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"Error: Config validation failed:\n{e}", file=sys.stderr)
            return 1

        # Apply CLI overrides
        if args.max_size is not None:
            config.override("retrace.history.max_size", args.max_size)
        if args.equality is not None:
            config.override("retrace.history.equality", args.equality)

        system_cfg = OmegaConf.select(cfg, "retrace.system", default=None)
        if system_cfg is not None:
            system = OmegaConf.to_container(system_cfg, resolve=True)
        try:
            history_config = config.history_config()
        except (TypeError, ValueError) as e:
            print(f"Error: Invalid history config: {e}", file=sys.stderr)
            return 1
    else:
        try:
            history_config = HistoryConfig.from_omegaconf(
                {"max_size": args.max_size, "equality": args.equality}
            )
        except (TypeError, ValueError) as e:
            print(f"Error: Invalid history config: {e}", file=sys.stderr)
            return 1

    # Setup logging
    log_level = args.log_level or system.get("log_level", "WARNING")
    log_file = args.log_file or system.get("log_file", None)
    log_json = args.log_json or system.get("log_json", False)
    setup_logging(log_level, log_file=log_file, log_json=log_json)

    try:
        initial = json.loads(args.initial)
    except json.JSONDecodeError as e:
        print(f"Error: --initial is not valid JSON: {e.msg}", file=sys.stderr)
        return 1

    binding = StateBinding.from_config(initial, history_config)

    try:
        if args.script == "-":
            run_script(sys.stdin, binding, sys.stdout, quiet=args.quiet)
        else:
            with open(args.script, encoding="utf-8") as fh:
                run_script(fh, binding, sys.stdout, quiet=args.quiet)
    except FileNotFoundError:
        print(f"Error: Script not found: {args.script}", file=sys.stderr)
        return 1
    except ScriptError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except UnicodeDecodeError as e:
        print(
            f"Error: script is not valid UTF-8: {e.reason} at byte {e.start}",
            file=sys.stderr,
        )
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
