"""Argument parsing functionality for srcpin."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="srcpin",
        description=(
            "srcpin - resolve package specifiers and repository references "
            "to a source repository and git ref"
        ),
        add_help=True,
    )

    parser.add_argument("specs",
                        metavar="SPEC",
                        help=("Package specifier (e.g. zod, pypi:requests==2.31.0, "
                              "maven:com.google.guava:guava) or repository "
                              "(e.g. github:owner/repo@ref, owner/repo)"),
                        nargs="*")
    parser.add_argument("-l", "--load_list",
                        dest="LIST_FROM_FILE",
                        help="Load specifiers from a file, one per line",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--allow-prerelease",
                        dest="ALLOW_PRERELEASE",
                        help="Consider prerelease versions when no version is given",
                        action="store_true")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write JSON results to this file instead of stdout",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP timeout in seconds (overrides config)",
                        action="store",
                        type=float)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors.",
                        action="store_true")

    args = parser.parse_args(argv)
    if not args.specs and not args.LIST_FROM_FILE:
        parser.error("at least one SPEC or --load_list file is required")
    return args
