"""Dependency resolver protocol and in-process implementations.

A resolver turns a (name, constraint) pair into a ResolvedDependency. Which
concrete version satisfies a constraint is entirely the resolver's decision.

- DependencyResolver: the protocol every resolver implements
- StaticResolver: fixed lookup table, for tests and offline use
- resolve_all: resolve a batch, optionally on a bounded thread pool
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol
from typing import runtime_checkable

from ..errors import ModlockError
from ..errors import ResolutionError
from .models import ResolvedDependency

logger = logging.getLogger(__name__)


@runtime_checkable
class DependencyResolver(Protocol):
    """Capability that resolves a dependency declaration.

    Implementations must raise ResolutionError on any failure.
    """

    def resolve(self, name: str, constraint: str) -> ResolvedDependency: ...


class StaticResolver:
    """Resolve from a fixed (name, constraint) -> ResolvedDependency table."""

    def __init__(self, table: Mapping[tuple[str, str], ResolvedDependency] | None = None):
        self.table = dict(table or {})

    def add(self, constraint: str, dependency: ResolvedDependency) -> None:
        """Register a dependency under its own name and the given constraint."""
        self.table[(dependency.name, constraint)] = dependency

    def resolve(self, name: str, constraint: str) -> ResolvedDependency:
        try:
            return self.table[(name, constraint)]
        except KeyError:
            raise ResolutionError(name, constraint, "not present in static table") from None

    def __repr__(self) -> str:
        return f"StaticResolver({len(self.table)} entries)"


def resolve_one(resolver: DependencyResolver, name: str, constraint: str) -> ResolvedDependency:
    """Resolve a single dependency, normalizing failures to ResolutionError."""
    logger.debug(f"[resolve] {name} {constraint} via {resolver!r}")
    try:
        return resolver.resolve(name, constraint)
    except ResolutionError:
        raise
    except (ModlockError, OSError, ValueError) as e:
        raise ResolutionError(name, constraint, str(e)) from e


def resolve_all(
    resolver: DependencyResolver,
    dependencies: Sequence[tuple[str, str]],
    max_workers: int = 1,
) -> list[ResolvedDependency]:
    """Resolve every (name, constraint) pair.

    Results are returned in the order of `dependencies` regardless of how many
    workers ran, so merging them stays deterministic. With max_workers > 1 the
    calls run on a thread pool; the first failure in declared order is raised
    and pending calls are cancelled.

    Raises:
        ResolutionError: Any dependency failed to resolve
    """
    if max_workers <= 1 or len(dependencies) <= 1:
        return [resolve_one(resolver, name, constraint) for name, constraint in dependencies]

    workers = min(max_workers, len(dependencies))
    logger.debug(f"Resolving {len(dependencies)} dependencies on {workers} workers")
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="modlock-resolve") as pool:
        futures: list[Future[ResolvedDependency]] = [
            pool.submit(resolve_one, resolver, name, constraint) for name, constraint in dependencies
        ]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            raise


__all__ = ["DependencyResolver", "StaticResolver", "resolve_all", "resolve_one"]
