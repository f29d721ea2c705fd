"""Commands understood by keeper and their dispatch.

The command set is closed: every command is one of the dataclasses below and
:func:`run_command` handles each of them explicitly.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from keeper.common import CommandError, LogContext, collapse_middle
from keeper.sfv import SfvConfig, record_with_config, verify_with_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

# Width used when echoing paths in progress messages
_PATH_DISPLAY_WIDTH = 72

COMMAND_SYNTAX = {
    "check": "check <sfv filename>",
    "record": "record <src dir> <sfv filename>",
}

# Number of arguments each command takes
COMMAND_ARITY = {
    "check": 1,
    "record": 2,
}


@dataclass(frozen=True)
class RecordCommand:
    """Record the checksums of ``source_dir`` into ``manifest_path``."""
    source_dir: Path
    manifest_path: Path


@dataclass(frozen=True)
class CheckCommand:
    """Verify the files listed in ``manifest_path``."""
    manifest_path: Path


Command = Union[RecordCommand, CheckCommand]


def known_commands() -> List[str]:
    """Command names in alphabetical order."""
    return sorted(COMMAND_SYNTAX)


def _expand(arg: str) -> Path:
    return Path(arg).expanduser()


def parse_command(tokens: Sequence[str], line_number: Optional[int] = None) -> Command:
    """Build a command from its name and arguments.

    Args:
        tokens: Command name followed by its arguments
        line_number: Batch file line the tokens came from, for error messages

    Raises:
        CommandError: If the command is unknown or has the wrong number of arguments
    """
    where = f" (line {line_number})" if line_number is not None else ""
    if not tokens:
        raise CommandError(f"Empty command{where}", line_number=line_number)

    name, args = tokens[0], list(tokens[1:])

    if name not in COMMAND_SYNTAX:
        raise CommandError(f"Unsupported command{where}: {name}", command=name, line_number=line_number)

    if len(args) != COMMAND_ARITY[name]:
        raise CommandError(
            f"Incorrect # of args{where}; syntax is: keeper {COMMAND_SYNTAX[name]}",
            command=name,
            line_number=line_number,
        )

    if name == "record":
        return RecordCommand(source_dir=_expand(args[0]), manifest_path=_expand(args[1]))
    return CheckCommand(manifest_path=_expand(args[0]))


def parse_batch_lines(lines: Iterable[str]) -> List[Command]:
    """Parse batch instruction lines, skipping blanks and ';' comments.

    Raises:
        CommandError: On the first invalid line; nothing is run in that case
    """
    commands = []
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(";"):
            continue
        commands.append(parse_command(stripped.split(), line_number=line_number))
    return commands


def parse_batch_file(batch_path: Path) -> List[Command]:
    """Read a batch instruction file.

    Raises:
        CommandError: If the file cannot be read or contains an invalid line
    """
    try:
        with open(batch_path, "r", encoding="utf-8-sig") as f:
            return parse_batch_lines(f)
    except (OSError, UnicodeDecodeError) as e:
        raise CommandError(f"Cannot read batch file {batch_path}: {e}", path=str(batch_path)) from e


def _run_record(command: RecordCommand, config: SfvConfig, log: logging.Logger) -> int:
    log.info(
        f"Running 'record': {collapse_middle(str(command.source_dir), _PATH_DISPLAY_WIDTH)} -> "
        f"{collapse_middle(str(command.manifest_path), _PATH_DISPLAY_WIDTH)}"
    )
    if record_with_config(command.source_dir, command.manifest_path, config, logger=log):
        return EXIT_OK
    log.error(f"Recording incomplete: {command.manifest_path}")
    return EXIT_FAILURE


def _run_check(command: CheckCommand, config: SfvConfig, log: logging.Logger) -> int:
    log.info(f"Running 'check': {collapse_middle(str(command.manifest_path), _PATH_DISPLAY_WIDTH)}")
    result = verify_with_config(command.manifest_path, config, logger=log)
    if result.errors:
        log.error("Summary of errors encountered:")
        for error in result.errors:
            log.error(error)
        return EXIT_FAILURE
    log.info("Success! No errors.")
    return EXIT_OK


def run_command(command: Command, config: SfvConfig, log: Optional[logging.Logger] = None) -> int:
    """Execute one command and return its exit code.

    Raises:
        TypeError: If ``command`` is not one of the known command types
    """
    log = log or logger
    if isinstance(command, RecordCommand):
        with LogContext(command="record", manifest=str(command.manifest_path)):
            return _run_record(command, config, log)
    if isinstance(command, CheckCommand):
        with LogContext(command="check", manifest=str(command.manifest_path)):
            return _run_check(command, config, log)
    raise TypeError(f"Unknown command type: {type(command).__name__}")


def run_commands(commands: Iterable[Command], config: SfvConfig, log: Optional[logging.Logger] = None) -> int:
    """Execute commands in order; the exit code is the worst one seen."""
    exit_code = EXIT_OK
    for command in commands:
        exit_code = max(exit_code, run_command(command, config, log))
    return exit_code
