"""Per-call resolution context threaded through every sub-resolver."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Tuple, Union

from depresolve.constants import Constants, Msg, Platform
from depresolve.errors import RecursionLimitExceeded
from depresolve.manifest import ManifestReader
from depresolve.probe import FileSystemProbe

if TYPE_CHECKING:
    from depresolve.strategy import PackageLocationStrategy

# What a resolution hook may answer for a specifier:
#   None  -> no opinion, run the default algorithm
#   False -> the module is disabled
#   Path  -> load this location instead
#   str   -> resolve this bare specifier instead
HookOutcome = Union[None, bool, Path, str]
ResolutionHook = Callable[[str, Path, "ResolutionContext"], Awaitable[HookOutcome]]


@dataclass(frozen=True)
class ResolutionContext:
    """Immutable bundle of collaborators and options for one resolve call.

    Recursive steps derive a new context with :meth:`evolve`; only the subject
    ``specifier``/``referrer`` and the recursion bookkeeping change.
    """

    fs: FileSystemProbe
    manifests: ManifestReader
    strategy: "PackageLocationStrategy"
    conditions: Tuple[str, ...] = ()
    main_fields: Tuple[str, ...] = ("main",)
    platform: Platform = Constants.DEFAULT_PLATFORM
    hook: Optional[ResolutionHook] = None
    specifier: Optional[str] = None
    referrer: Optional[Path] = None
    is_dependency: bool = True
    max_depth: int = Constants.MAX_RESOLUTION_DEPTH
    chain: Tuple[str, ...] = field(default=())

    @property
    def root(self) -> Path:
        """Resolution boundary; ancestor walks never go above it."""
        return self.strategy.root

    @property
    def depth(self) -> int:
        return len(self.chain)

    def evolve(self, **changes) -> "ResolutionContext":
        """Copy of this context with ``changes`` applied."""
        return replace(self, **changes)

    def without_hook(self) -> "ResolutionContext":
        return replace(self, hook=None)

    def descend(self, key: str) -> "ResolutionContext":
        """Enter a cross-package step identified by ``key``.

        Raises:
            RecursionLimitExceeded: when ``key`` is already on the chain or the
                chain is as deep as ``max_depth``.
        """
        if key in self.chain:
            raise RecursionLimitExceeded(
                Msg.RECURSION_CYCLE.format(specifier=key), specifier=key
            )
        if len(self.chain) >= self.max_depth:
            raise RecursionLimitExceeded(
                Msg.RECURSION_LIMIT.format(specifier=key, depth=self.max_depth),
                specifier=key,
            )
        return replace(self, chain=self.chain + (key,))


async def run_hook(specifier: str, referrer: Path, context: ResolutionContext) -> HookOutcome:
    """Ask the context's hook about ``specifier``; ``None`` when there is no hook."""
    if context.hook is None:
        return None
    return await context.hook(specifier, referrer, context)
