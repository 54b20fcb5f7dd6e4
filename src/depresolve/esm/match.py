"""RESOLVE_ESM_MATCH: turn an exports/imports match into a verified result."""

from __future__ import annotations

import logging
from pathlib import Path

from depresolve.common.logging_utils import extra_context, is_debug_enabled
from depresolve.context import ResolutionContext
from depresolve.errors import NotFound
from depresolve.format import file_format
from depresolve.models import ResolveResult

logger = logging.getLogger(__name__)


async def resolve_esm_match(match: Path, context: ResolutionContext) -> ResolveResult:
    """Load ``match`` as its extension format.

    Unlike the CommonJS loaders there is no extension or index fallback.

    Raises:
        NotFound: when no file exists at ``match``.
    """
    if await context.fs.exist_file(match):
        return ResolveResult.from_path(match, await file_format(match, context))

    if is_debug_enabled(logger):
        logger.debug(
            "Export target missing on disk",
            extra=extra_context(event="esm_match", component="esm", target=str(match), outcome="missing"),
        )
    raise NotFound.for_specifier(context.specifier or str(match), context.referrer)
