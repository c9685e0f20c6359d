# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI for migrating legacy practices into grouped target standards."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Mapping, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from lpi.api_keys import InvalidApiKeyError
from lpi.config import (
    AppConfig,
    ConfigError,
    build_llm_client,
    load_config,
    read_environment,
    require_setting,
)
from lpi.language import UnknownLanguageError
from lpi.pipeline import (
    StepSummary,
    export_collection,
    fetch_source_collections,
    import_workspace,
    init_workspace,
    map_workspace,
    validate_workspace,
)
from lpi.practice_reader import PracticeParseError, load_practices
from lpi.source_api import SourceApiError, SourceCatalogClient
from lpi.stats import render_stats
from lpi.target_api import TargetImportClient
from lpi.workspace import MINIFIED_SUFFIX, Workspace, WorkspaceError

logger = logging.getLogger(__name__)

FATAL_ERRORS: tuple[type[Exception], ...] = (
    ConfigError,
    InvalidApiKeyError,
    PracticeParseError,
    SourceApiError,
    UnknownLanguageError,
    WorkspaceError,
    OSError,
)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="lpi")
    parser.add_argument(
        "--workspace",
        required=False,
        help="Workspace directory holding exports and artifacts (default: LPI_WORKSPACE or res).",
    )
    parser.add_argument(
        "--env-file", required=False, help="Optional .env file path (default: ./.env)."
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Show practice statistics.")
    stats_parser.add_argument("--input", required=True, help="JSONL practice export.")

    subparsers.add_parser("get-spaces", help="Fetch the source collection catalog.")

    init_parser = subparsers.add_parser(
        "init", help="Export collections to practice YAML documents."
    )
    init_parser.add_argument(
        "--input", required=False, help="Single JSONL export to convert."
    )
    init_parser.add_argument(
        "--output",
        required=False,
        help="Output YAML path for --input (default: input path with .yaml suffix).",
    )

    map_parser = subparsers.add_parser(
        "map", help="Run get-spaces, init and LLM grouping for every collection."
    )
    map_parser.add_argument(
        "--skip-fetch",
        action="store_true",
        help="Reuse the existing spaces.json and practice documents.",
    )

    subparsers.add_parser("validate", help="Assemble standards validation documents.")
    subparsers.add_parser("import", help="Import validated standards into the target.")
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        environ: Environment variables; read from ``.env`` and the process
            environment when omitted.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if environ is None:
        environ = read_environment(Path(args.env_file) if args.env_file else None)
    config = load_config(environ)
    workspace = Workspace(Path(args.workspace) if args.workspace else config.workspace_dir)
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")

    try:
        if args.command == "stats":
            return _run_stats(args, console)
        if args.command == "get-spaces":
            return _run_get_spaces(config, workspace, console)
        if args.command == "init":
            return _run_init(args, config, workspace, console)
        if args.command == "map":
            return _run_map(args, config, workspace, console)
        if args.command == "validate":
            return _run_validate(config, workspace, console)
        if args.command == "import":
            return _run_import(config, workspace, console)
    except FATAL_ERRORS as exc:
        logger.warning(f"Command failed (command={args.command} error={exc})")
        stderr.write(f"Error: {exc}\n")
        return 1

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_stats(args: argparse.Namespace, console: Console) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise WorkspaceError(f"Practice export not found: {input_path}")
    render_stats(load_practices(input_path), console)
    return 0


def _run_get_spaces(config: AppConfig, workspace: Workspace, console: Console) -> int:
    client = SourceCatalogClient(
        require_setting(config.source_api_key, "SOURCE_API_KEY")
    )
    collections = fetch_source_collections(workspace, client)
    console.print(
        f"Fetched {len(collections)} source collection(s) into {workspace.spaces_path}"
    )
    return 0


def _run_init(
    args: argparse.Namespace,
    config: AppConfig,
    workspace: Workspace,
    console: Console,
) -> int:
    """Run init command in single-file or workspace mode.

    Args:
        args: Parsed CLI arguments.
        config: Application config.
        workspace: Workspace layout.
        console: Output console.

    Returns:
        Exit code.
    """
    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            raise WorkspaceError(f"Input file not found: {input_path}")
        output_path = (
            Path(args.output) if args.output else input_path.with_suffix(".yaml")
        )
        minified_path = output_path.with_name(
            output_path.name.removesuffix(".yaml") + MINIFIED_SUFFIX
        )
        counts = export_collection(
            input_path, output_path, minified_path, config.context_lines
        )
        console.print(
            f"Exported {counts['practices']} practice(s) with "
            f"{counts['examples']} example(s) to {output_path}"
        )
        return 0

    summary = init_workspace(workspace, config.context_lines)
    _write_summary(summary, console, ("practices", "examples", "minified_examples"))
    return _exit_code(summary)


def _run_map(
    args: argparse.Namespace,
    config: AppConfig,
    workspace: Workspace,
    console: Console,
) -> int:
    """Run the full get-spaces, init and grouping pipeline.

    Args:
        args: Parsed CLI arguments.
        config: Application config.
        workspace: Workspace layout.
        console: Output console.

    Returns:
        Exit code.
    """
    llm_client = build_llm_client(config)
    if not args.skip_fetch:
        _run_get_spaces(config, workspace, console)
        init_summary = init_workspace(workspace, config.context_lines)
        _write_summary(
            init_summary, console, ("practices", "examples", "minified_examples")
        )
    summary = map_workspace(workspace, llm_client, max_attempts=config.max_attempts)
    _write_summary(
        summary,
        console,
        (
            "groups",
            "members",
            "attempts",
            "repair_rounds",
            "duplicates_removed",
            "fallback_members",
        ),
    )
    return _exit_code(summary)


def _run_validate(config: AppConfig, workspace: Workspace, console: Console) -> int:
    summary = validate_workspace(workspace, config.context_lines)
    _write_summary(
        summary,
        console,
        (
            "standards",
            "rules",
            "rules_with_detection",
            "positive_examples",
            "negative_examples",
        ),
    )
    return _exit_code(summary)


def _run_import(config: AppConfig, workspace: Workspace, console: Console) -> int:
    client = TargetImportClient(
        require_setting(config.target_api_key, "TARGET_API_KEY")
    )
    summary = import_workspace(workspace, client)
    _write_summary(summary, console, ("imported", "failed"))
    console.print(
        f"Standards imported: {summary.total('imported')} "
        f"failed: {summary.total('failed')}",
        highlight=False,
    )
    return _exit_code(summary)


def _exit_code(summary: StepSummary) -> int:
    return 0 if summary.succeeded > 0 else 1


def _write_summary(
    summary: StepSummary, console: Console, count_names: tuple[str, ...]
) -> None:
    """Write a step summary as a Rich table.

    Args:
        summary: Step summary.
        console: Output console.
        count_names: Count columns to show, in order.
    """
    console.rule(f"{summary.step}", style=Style(color="cyan"), characters="-")
    table = Table(show_header=True, show_lines=True, expand=True)
    table.add_column("collection", ratio=3, overflow="fold")
    table.add_column("status", ratio=1)
    for name in count_names:
        table.add_column(name, ratio=1, justify="right")
    table.add_column("message", ratio=3, overflow="fold")
    for outcome in summary.outcomes:
        table.add_row(
            outcome.slug,
            outcome.status,
            *[str(outcome.counts.get(name, "")) for name in count_names],
            outcome.message,
        )
    console.print(table)
    console.print(
        f"{summary.step}: succeeded={summary.succeeded} failed={summary.failed} "
        f"skipped={summary.skipped}",
        highlight=False,
    )


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
