# SPDX-License-Identifier: MIT
"""Command-line interface for emcons."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from emcons.configure.config import LayeredConfig
from emcons.configure.options import DEFAULT_PLATFORM
from emcons.configure.sdk import EmscriptenSdk
from emcons.core.action import ActionGraph
from emcons.core.errors import EmconsError
from emcons.generators.compile_commands import CompileCommandsGenerator
from emcons.job import load_job
from emcons.toolchains.emscripten import EmscriptenToolchain

# Set up logging
logger = logging.getLogger("emcons")

ACTIONS_FILE = "actions.json"


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def make_toolchain(args: argparse.Namespace) -> EmscriptenToolchain:
    """Create the toolchain from common command-line arguments.

    Raises:
        SdkNotInstalledError: If no SDK is found.
    """
    sdk = EmscriptenSdk.locate(args.sdk) if args.sdk else None
    config = LayeredConfig.from_files(args.config or [], platform=args.platform)
    return EmscriptenToolchain(
        sdk=sdk,
        config=config,
        platform=args.platform,
        root_dir=args.root_dir,
        intermediate_dir=args.intermediate_dir,
    )


def cmd_options(args: argparse.Namespace) -> int:
    """Print the resolved toolchain options."""
    setup_logging(args.verbose, args.debug)

    toolchain = make_toolchain(args)
    options = toolchain.options
    print(f"Emscripten SDK: {toolchain.sdk.emscripten_root}")
    print(f"Emscripten version: {toolchain.sdk.version()}")
    print(f"multithreading: {options.multithreading}")
    print(f"offscreen_canvas: {options.use_offscreen_canvas}")
    print(f"tracing: {options.tracing}")
    print(f"profiler_mode: {options.profiler_mode.value}")
    print(f"simd: {options.simd}")
    print(f"session_storage_key: {options.session_storage_key or ''}")
    print(f"third_party_lib_dir: {toolchain.third_party_lib_dir}")
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Build the action graph for a job and write it out.

    Writes response files, actions.json and, with
    --compile-commands, compile_commands.json.
    """
    setup_logging(args.verbose, args.debug)

    job = load_job(args.job)
    toolchain = make_toolchain(args)

    graph = ActionGraph()
    job.build(toolchain, graph)
    graph.materialize()

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    actions_file = output_dir / ACTIONS_FILE
    with open(actions_file, "w") as f:
        json.dump([action.to_dict() for action in graph.actions], f, indent=2)
        f.write("\n")
    logger.info("Wrote %d actions to %s", len(graph.actions), actions_file)

    if args.compile_commands:
        CompileCommandsGenerator(root_dir=args.root_dir).generate(graph, output_dir)

    print(f"Planned {len(graph.actions)} actions in {actions_file}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "-c",
        "--config",
        action="append",
        metavar="FILE",
        help="JSON config layer; repeat to stack layers, lowest priority first",
    )
    parser.add_argument("--sdk", help="Emscripten SDK root (default: $EMSDK)")
    parser.add_argument(
        "--platform",
        default=DEFAULT_PLATFORM,
        help=f"Platform key for config layers (default: {DEFAULT_PLATFORM})",
    )
    parser.add_argument(
        "--root-dir",
        type=Path,
        help="Include paths under this directory are made relative",
    )
    parser.add_argument(
        "--intermediate-dir",
        default="Intermediate/HTML5",
        help="Scratch directory for Emscripten (default: Intermediate/HTML5)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the emcons CLI."""
    parser = argparse.ArgumentParser(
        prog="emcons",
        description="Emscripten toolchain adapter for HTML5 builds.",
        epilog="Run 'emcons <command> --help' for command-specific help.",
    )
    from emcons import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # emcons options
    options_parser = subparsers.add_parser(
        "options", help="Show the resolved toolchain options"
    )
    add_common_args(options_parser)
    options_parser.set_defaults(func=cmd_options)

    # emcons plan
    plan_parser = subparsers.add_parser(
        "plan", help="Build the action graph for a job file"
    )
    add_common_args(plan_parser)
    plan_parser.add_argument("job", help="Path to the JSON job description")
    plan_parser.add_argument(
        "-o",
        "--output-dir",
        default=".",
        help="Directory for actions.json (default: current directory)",
    )
    plan_parser.add_argument(
        "--compile-commands",
        action="store_true",
        help="Also write compile_commands.json",
    )
    plan_parser.set_defaults(func=cmd_plan)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        result: int = args.func(args)
    except EmconsError as e:
        logger.error("%s", e)
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
