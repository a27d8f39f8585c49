"""Argument parsing functionality for mvnresolve."""

import argparse

from maven.models import DependencyScope


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate from parsing so tests can feed argv)."""
    parser = argparse.ArgumentParser(
        prog="mvnresolve",
        description=(
            "mvnresolve - resolve Maven artifacts and their transitive dependencies"
        ),
        add_help=True,
    )

    parser.add_argument("coordinates",
                        metavar="GROUP:ARTIFACT:VERSION",
                        help="Root artifact(s) to resolve",
                        nargs="+",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--cache-dir",
                        dest="CACHE_DIR",
                        help="Cache directory (default: ~/.cache/mvnresolve)",
                        action="store",
                        type=str)
    parser.add_argument("-r", "--repository",
                        dest="REPOSITORIES",
                        help="Repository URL or local directory, in lookup order. Replaces configured repositories.",
                        action="append",
                        type=str)
    parser.add_argument("--include-test",
                        dest="INCLUDE_TEST",
                        help="Also follow dependencies with test scope",
                        action="store_true")
    parser.add_argument("--include-provided",
                        dest="INCLUDE_PROVIDED",
                        help="Also follow dependencies with provided scope",
                        action="store_true")
    parser.add_argument("--scope",
                        dest="SCOPE",
                        help="Scope recorded on resolved jars",
                        action="store",
                        type=str,
                        choices=[s.value for s in DependencyScope])
    parser.add_argument("-b", "--blacklist",
                        dest="BLACKLIST",
                        help="group:artifact whose dependencies are never followed (repeatable)",
                        action="append",
                        type=str)
    parser.add_argument("--direct",
                        dest="DIRECT",
                        help="Resolve only the given artifacts, not their dependencies",
                        action="store_true")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write the result as JSON to this file instead of printing jar paths",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $MVNRESOLVE_LOG_LEVEL or INFO)",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
