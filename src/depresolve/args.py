"""Argument parsing for the depresolve CLI."""

import argparse

from depresolve.constants import Platform, StrategyType


def build_parser():
    """Build the top-level parser with its ``resolve`` subcommand."""
    parser = argparse.ArgumentParser(
        prog="depresolve",
        description="Resolve module specifiers the way Node.js does, for bundlers",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="COMMAND", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve one specifier and print the result as JSON")
    resolve.add_argument("SPECIFIER",
                         help="Graph specifier, or the import written in --importer / --referrer",
                         type=str)
    resolve.add_argument("-g", "--graph",
                         dest="GRAPH",
                         help="Dependency graph JSON (deno info --json output)",
                         action="store", type=str)
    resolve.add_argument("-i", "--importer",
                         dest="IMPORTER",
                         help="Graph specifier of the importing module",
                         action="store", type=str)
    resolve.add_argument("-r", "--referrer",
                         dest="REFERRER",
                         help="Path of the importing file",
                         action="store", type=str)
    resolve.add_argument("-k", "--kind",
                         dest="KIND",
                         help="Bundler import kind, e.g. import-statement or require-call",
                         action="store", type=str)
    resolve.add_argument("--platform",
                         dest="PLATFORM",
                         help="Target platform (default: browser)",
                         action="store", type=str.lower,
                         choices=[p.value for p in Platform])
    resolve.add_argument("-c", "--condition",
                         dest="CONDITIONS",
                         help="Resolution condition; repeat for several",
                         action="append", type=str)
    resolve.add_argument("-m", "--main-field",
                         dest="MAIN_FIELDS",
                         help="package.json main field; repeat for several",
                         action="append", type=str)
    resolve.add_argument("--strategy",
                         dest="STRATEGY",
                         help="Package location strategy (default: local)",
                         action="store", type=str.lower,
                         choices=[s.value for s in StrategyType])
    resolve.add_argument("--cache-dir",
                         dest="CACHE_DIR",
                         help="Package store root for the global strategy",
                         action="store", type=str)
    resolve.add_argument("--node-modules-dir",
                         dest="NODE_MODULES_DIR",
                         help="node_modules directory for the local strategy",
                         action="store", type=str)
    resolve.add_argument("--max-depth",
                         dest="MAX_DEPTH",
                         help="Maximum cross-package resolution depth",
                         action="store", type=int)
    resolve.add_argument("--config",
                         dest="CONFIG",
                         help="YAML configuration file",
                         action="store", type=str)
    resolve.add_argument("--loglevel",
                         dest="LOG_LEVEL",
                         help="Set the logging level",
                         action="store", type=str.upper,
                         choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    resolve.add_argument("--logfile",
                         dest="LOG_FILE",
                         help="Log output file",
                         action="store", type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
