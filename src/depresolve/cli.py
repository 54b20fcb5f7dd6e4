"""Command line entry point."""

import asyncio
import json
import logging
import sys

from depresolve.adapter import ResolveArgs, ResolverHook, to_hook_result
from depresolve.args import parse_args
from depresolve.common.logging_utils import configure_logging, extra_context, is_debug_enabled
from depresolve.config import ConfigError, load_config
from depresolve.constants import ExitCodes
from depresolve.errors import DependencyGraphError, ResolutionError
from depresolve.graph import ModuleGraph

logger = logging.getLogger(__name__)


def _cli_overrides(args):
    return {
        "platform": args.PLATFORM,
        "conditions": args.CONDITIONS,
        "main_fields": args.MAIN_FIELDS,
        "strategy": args.STRATEGY,
        "cache_dir": args.CACHE_DIR,
        "node_modules_dir": args.NODE_MODULES_DIR,
        "max_depth": args.MAX_DEPTH,
        "log_level": args.LOG_LEVEL,
        "log_file": args.LOG_FILE,
    }


def load_graph(path):
    """Read a dependency graph JSON file."""
    with open(path, "r", encoding="utf-8") as handle:
        return ModuleGraph.from_json(handle.read())


async def run_resolve(args, config):
    """Resolve ``args.SPECIFIER`` and return ``(exit_code, payload)``."""
    if args.GRAPH:
        resolver = config.build_resolver(load_graph(args.GRAPH))
        hook = ResolverHook(resolver)
        result = await hook.on_resolve(ResolveArgs(
            specifier=args.SPECIFIER,
            importer=args.IMPORTER,
            referrer=args.REFERRER,
            kind=args.KIND,
        ))
        code = ExitCodes.SUCCESS if result.ok else ExitCodes.RESOLUTION_ERROR
        return code, result.to_dict()

    if not args.REFERRER:
        return ExitCodes.FILE_ERROR, {"errors": ["Either --graph or --referrer is required"]}
    resolver = config.build_resolver()
    try:
        result = await resolver.require(args.SPECIFIER, args.REFERRER, kind=args.KIND or "require-call")
    except ResolutionError as exc:
        return ExitCodes.RESOLUTION_ERROR, {"errors": [str(exc)]}
    return ExitCodes.SUCCESS, to_hook_result(result).to_dict()


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)

    try:
        config = load_config(args.CONFIG, _cli_overrides(args))
    except ConfigError as exc:
        sys.stderr.write(f"ERROR: {exc}\n")
        sys.exit(ExitCodes.FILE_ERROR.value)

    configure_logging(config.log_level, config.log_file)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        code, payload = asyncio.run(run_resolve(args, config))
    except (OSError, DependencyGraphError) as exc:
        logger.error("Unable to load the dependency graph: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)

    sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    sys.exit(code.value)


if __name__ == "__main__":
    main()
