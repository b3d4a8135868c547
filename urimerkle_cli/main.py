"""
Module 09C - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m urimerkle_cli build <mapping.json> [--out DIR] [--formats LIST] [--workers N] [--json]
    python -m urimerkle_cli verify <export_dir> [--json] [--debug]
    python -m urimerkle_cli prove <export_dir> <index> [--json]
    python -m urimerkle_cli config --init

Environment Variables:
    URIMERKLE_OUTPUT_DIR                Default export directory
    URIMERKLE_WORKERS                   Leaf encoding threads (default: 1)
    URIMERKLE_EXPORT_FORMATS            Comma-separated: json,csv,solidity,typescript
    URIMERKLE_SOLIDITY_LIBRARY          Solidity library name (default: MerkleConstants)
    URIMERKLE_DETERMINISTIC_TIMESTAMPS  Use a fixed generatedAt (default: false)
    URIMERKLE_LOG_LEVEL                 Log level (default: INFO)
    URIMERKLE_LOG_FILE                  Also log to this file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from urimerkle_cli import __version__
from urimerkle_cli.commands import build, prove, verify
from urimerkle_cli.config import load_config, get_default_config_template


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="urimerkle",
        description="Build, verify and query Merkle commitments over index -> URI mappings.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./urimerkle.json or ~/.config/urimerkle/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a commitment from a mapping file",
        description="Build the tree, generate and self-check every proof, then write the export directory.",
    )
    build_parser.add_argument(
        "mapping",
        type=str,
        help='JSON mapping file: {"<index>": "<uri>", ...} or [{"index", "uri"}, ...]',
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output directory (default: from config or ./merkle)",
    )
    build_parser.add_argument(
        "--formats",
        type=str,
        default=None,
        help="Comma-separated artifacts: json,csv,solidity,typescript or 'all'",
    )
    build_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Leaf encoding threads (default: from config or 1)",
    )
    build_parser.add_argument(
        "--deterministic",
        action="store_true",
        default=False,
        help="Use a fixed generatedAt timestamp for reproducible output",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an export directory offline",
        description="Verify file hashes, recompute every leaf and the root, and check every proof.",
    )
    verify_parser.add_argument(
        "export_path",
        type=str,
        help="Path to export directory",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include detailed checks",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Show and re-verify the proof for one index",
        description="Print uri, leaf and proof for an index and verify it against the stored root.",
    )
    prove_parser.add_argument(
        "export_path",
        type=str,
        help="Path to export directory (or merkle-tree.json)",
    )
    prove_parser.add_argument(
        "index",
        type=str,
        help="Record index",
    )
    prove_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="JSON output",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="urimerkle.json",
        help="Path for config file (default: urimerkle.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (URIMERKLE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        config = load_config(Path(args.path) if args.path else None)
        print(json.dumps(config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: urimerkle config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
