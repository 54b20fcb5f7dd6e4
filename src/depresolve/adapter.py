"""Bundler hook adapter around :class:`ModuleResolver`.

Translates resolve-hook arguments into resolver calls and resolver outcomes
back into hook results. A disabled module becomes an empty-module result,
every other failure a structured error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from depresolve.common.logging_utils import extra_context
from depresolve.constants import Format, Namespace
from depresolve.errors import ExplicitlyExcluded, ResolutionError
from depresolve.models import ResolveResult
from depresolve.resolver import ModuleResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveArgs:
    """One resolve request from the bundler."""

    specifier: str
    importer: Optional[str] = None
    referrer: Optional[Path] = None
    kind: Optional[str] = None
    conditions: Optional[List[str]] = None
    main_fields: Optional[List[str]] = None


@dataclass
class HookResult:
    """What the bundler receives back."""

    path: Optional[str] = None
    namespace: Optional[Namespace] = None
    format: Optional[Format] = None
    external: bool = False
    side_effects: Optional[bool] = None
    media_type: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly rendering, omitting unset fields."""
        data: Dict[str, Any] = {
            "path": self.path,
            "namespace": self.namespace.value if self.namespace else None,
            "format": self.format.value if self.format else None,
            "external": self.external or None,
            "sideEffects": self.side_effects,
            "mediaType": self.media_type,
            "errors": self.errors or None,
        }
        return {key: value for key, value in data.items() if value is not None}


def to_hook_result(result: ResolveResult) -> HookResult:
    """Render a successful resolution for the bundler."""
    if result.is_builtin:
        return HookResult(path=result.url, namespace=Namespace.EXTERNAL, format=result.format, external=True)
    path = result.path
    if path is None:
        return HookResult(path=result.url, namespace=Namespace.REMOTE, format=result.format,
                          media_type=result.media_type)
    return HookResult(
        path=str(path),
        namespace=Namespace.FILE,
        format=result.format,
        side_effects=result.side_effects,
        media_type=result.media_type,
    )


class ResolverHook:
    """The ``on_resolve`` callback a bundler plugin registers."""

    def __init__(self, resolver: ModuleResolver):
        self.resolver = resolver

    async def on_resolve(self, args: ResolveArgs) -> HookResult:
        """Resolve ``args``; never raises for resolution failures."""
        resolver = self.resolver
        if args.conditions is not None or args.main_fields is not None:
            resolver = resolver.with_options(conditions=args.conditions, main_fields=args.main_fields)

        try:
            result = await resolver.resolve(
                args.specifier, importer=args.importer, referrer=args.referrer, kind=args.kind
            )
        except ExplicitlyExcluded as exc:
            logger.debug(
                "Module disabled",
                extra=extra_context(event="on_resolve", component="adapter",
                                    target=args.specifier, outcome="disabled"),
            )
            return HookResult(path=exc.path, namespace=Namespace.DISABLED)
        except ResolutionError as exc:
            logger.warning(
                "Failed to resolve %s: %s",
                args.specifier,
                exc,
                extra=extra_context(event="on_resolve", component="adapter",
                                    target=args.specifier, outcome=type(exc).__name__),
            )
            return HookResult(errors=[str(exc)])
        return to_hook_result(result)
