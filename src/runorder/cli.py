"""CLI entry point for runorder."""

import argparse
import asyncio
import logging
import sys

from runorder.core.orchestrator import Orchestrator
from runorder.errors import OrchestratorError
from runorder.taskfile import load_taskfile, register


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runorder",
        description="Run tasks in dependency order, concurrently where possible",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show task progress and debug logging")

    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run targets from a task file")
    run.add_argument("taskfile", help="Path to the YAML task file")
    run.add_argument("targets", nargs="*", help="Tasks to run (default: all)")
    run.add_argument("--dry-run", action="store_true", help="Print the run order without executing")

    ls = sub.add_parser("list", help="List tasks and their dependencies")
    ls.add_argument("taskfile", help="Path to the YAML task file")

    return parser


def _load(path: str, verbose: bool) -> Orchestrator:
    return register(Orchestrator(verbose=verbose), load_taskfile(path))


async def _run(args: argparse.Namespace) -> int:
    orch = _load(args.taskfile, args.verbose)

    if args.dry_run:
        seq = orch.sequence(*args.targets)
        print(f"Task file: {args.taskfile}")
        print(f"Tasks: {len(seq)}")
        for i, name in enumerate(seq, 1):
            print(f"  {i}. {name}")
        print("\nDry run: no tasks executed.")
        return 0

    try:
        await orch.run_async(*args.targets)
    except OrchestratorError as e:
        print(f"\nFailed: {e}", file=sys.stderr)
        return 1
    print("\nAll tasks succeeded")
    return 0


def _list(args: argparse.Namespace) -> int:
    orch = _load(args.taskfile, args.verbose)
    for task in orch.tasks:
        deps = f" <- {', '.join(task.dependencies)}" if task.dependencies else ""
        print(f"{task.name}{deps}")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        if args.command == "run":
            code = asyncio.run(_run(args))
        elif args.command == "list":
            code = _list(args)
        else:
            parser.print_help()
            code = 1
    except (OrchestratorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)
