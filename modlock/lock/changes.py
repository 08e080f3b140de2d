"""Diff a manifest's declared dependencies against an existing lock."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..manifest import Manifest
from ..manifest import module_key
from .models import LockfileModule

logger = logging.getLogger(__name__)


def resolve_changes(
    manifest: Manifest,
    lockfile_modules: Mapping[str, LockfileModule],
) -> tuple[list[tuple[str, str]], dict[str, LockfileModule]]:
    """Split declared dependencies into changed ones and reusable lock entries.

    A dependency is unchanged when `"<name> <constraint>"`, using the declared
    constraint string verbatim, is already a module key in the lock. This is a
    purely textual match: a pinned entry stays pinned until the declared
    constraint string itself changes, even if the registry could now pick a
    newer version for the same constraint.

    Args:
        manifest: Root manifest
        lockfile_modules: Module map of the existing lockfile

    Returns:
        Tuple of (changed (name, constraint) pairs in declared order,
        unchanged key -> copied LockfileModule)

    Raises:
        ManifestError: Malformed dependency declarations
    """
    changes: list[tuple[str, str]] = []
    not_changed: dict[str, LockfileModule] = {}

    for name, constraint in manifest.dependency_pairs():
        key = module_key(name, constraint)
        lockfile_module = lockfile_modules.get(key)
        if lockfile_module is None:
            changes.append((name, constraint))
        else:
            not_changed[key] = lockfile_module.model_copy()

    logger.debug(f"Dependency diff: {len(changes)} changed, {len(not_changed)} unchanged")
    return changes, not_changed
