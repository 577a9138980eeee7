"""srcpin resolves package specifiers and repository references to a
source repository URL, a monorepo subdirectory and an ordered list of git
refs to try when checking the source out.

  Raises:
      SystemExit: exit code follows ``ExitCodes``.
"""

import json
import logging
import os
import sys
from typing import List

from args import parse_args
from cli_config import configure_from_args
from common.errors import TransportError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from registry.dispatcher import ResolutionOutcome, SourceResolver

logger = logging.getLogger(__name__)


def load_specs_file(file_name):
    """Loads specifiers from a file, one per line.

    Blank lines and lines starting with ``#`` are skipped.

    Args:
        file_name (str): File path containing the list of specifiers.

    Returns:
        list: List of specifiers
    """
    try:
        with open(file_name, encoding='utf-8') as file:
            lines = [line.strip() for line in file]
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return [line for line in lines if line and not line.startswith("#")]


def build_spec_list(args) -> List[str]:
    """Collect specifiers from the command line and any list files, de-duplicated in order."""
    specs = [s.strip() for s in args.specs if s and s.strip()]
    for path in args.LIST_FROM_FILE:
        specs.extend(load_specs_file(path))
    return list(dict.fromkeys(specs))


def exit_code_for(outcomes: List[ResolutionOutcome]) -> ExitCodes:
    """0 when everything resolved, 2 when every failure was a transport error, else 1."""
    failures = [o.error for o in outcomes if not o.ok]
    if not failures:
        return ExitCodes.SUCCESS
    if all(isinstance(err, TransportError) for err in failures):
        return ExitCodes.CONNECTION_ERROR
    return ExitCodes.RESOLUTION_ERROR


def export_json(outcomes: List[ResolutionOutcome], path=None):
    """Writes the outcomes as a JSON array to ``path``, or stdout when unset."""
    data = [o.to_dict() for o in outcomes]
    if not path:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=2)
        logging.info("JSON file saved successfully.")
    except OSError as e:
        logging.error("JSON file couldn't be saved: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    if args.QUIET:
        os.environ[Constants.ENV_LOG_LEVEL] = "ERROR"
    elif getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    configure_from_args(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    specs = build_spec_list(args)
    if not specs:
        logging.error("No specifiers to resolve.")
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)

    resolver = SourceResolver()
    outcomes = resolver.resolve_many(specs, allow_prerelease=args.ALLOW_PRERELEASE)
    export_json(outcomes, args.OUTPUT)

    code = exit_code_for(outcomes)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome="success" if code is ExitCodes.SUCCESS else "failure",
                count=len(outcomes),
            )
        )
    sys.exit(code.value)


if __name__ == "__main__":
    main()
