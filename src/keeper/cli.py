"""Command line entry point for keeper."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from keeper.common import CommandError, ConfigLoader, ConfigurationError, classify_error, setup_logging
from keeper.sfv import KeeperConfig
from .commands import EXIT_USAGE, COMMAND_SYNTAX, known_commands, parse_batch_file, parse_command, run_commands

# Application name derived from package name
_package = __package__ or "keeper"
APP_NAME = _package.replace('_', '-').replace('.', '-')


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Record and verify SFV (CRC32) checksum manifests"
    )
    parser.add_argument(
        "command",
        nargs="*",
        help="Command and its arguments: " + "; ".join(COMMAND_SYNTAX[name] for name in known_commands())
    )
    parser.add_argument(
        "-F",
        dest="batch_file",
        type=Path,
        help="File containing a sequence of commands, one per line"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (overrides config)"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write a JSON log to this file (overrides config)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Threads used to compute checksums (overrides config)"
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Record files in subdirectories too"
    )
    parser.add_argument(
        "--report-extra",
        action="store_true",
        help="When checking, report files not listed in the manifest"
    )
    return parser


def apply_overrides(config: KeeperConfig, args: argparse.Namespace) -> KeeperConfig:
    """Return a copy of ``config`` with command line overrides applied."""
    logging_updates = {}
    if args.log_level:
        logging_updates["level"] = args.log_level
    if args.log_file:
        logging_updates["file"] = str(args.log_file)

    sfv_updates = {}
    if args.workers is not None:
        sfv_updates["workers"] = args.workers
    if args.recursive:
        sfv_updates["recursive"] = True
    if args.report_extra:
        sfv_updates["report_extra_files"] = True

    # Round-trip through validation so overrides obey the same rules as files
    data = config.model_dump()
    data["logging"].update(logging_updates)
    data["sfv"].update(sfv_updates)
    return KeeperConfig(**data)


def print_known_commands(logger: logging.Logger) -> None:
    logger.info("Known commands:")
    for name in known_commands():
        logger.info(f"  {COMMAND_SYNTAX[name]}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the keeper command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Use __package__ to avoid __main__ when run as module
    logger = logging.getLogger(__package__ or __name__)

    try:
        loader = ConfigLoader(app_name=APP_NAME, config_class=KeeperConfig)
        config = apply_overrides(loader.load(defaults_path=args.config), args)
    except (ConfigurationError, ValueError) as e:
        setup_logging()
        logger.error(f"Invalid configuration: {{'error': {str(e)!r}, 'category': {classify_error(e)!r}}}")
        return EXIT_USAGE

    # Setup logging with config values
    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=Path(config.logging.file) if config.logging.file else None,
    )

    if not args.command and args.batch_file is None:
        logger.error(f"Syntax: {APP_NAME} <cmd> [<arg> ...]")
        print_known_commands(logger)
        return EXIT_USAGE

    try:
        commands = []
        if args.batch_file is not None:
            logger.info(f"Processing batch instruction file {args.batch_file}")
            commands.extend(parse_batch_file(args.batch_file))
        # Also process the command on the command line, if present
        if args.command:
            commands.append(parse_command(args.command))
    except CommandError as e:
        logger.error(f"{e.message}: {{'category': {classify_error(e)!r}}}")
        print_known_commands(logger)
        return EXIT_USAGE

    return run_commands(commands, config.sfv, logger)


if __name__ == "__main__":
    sys.exit(main())
