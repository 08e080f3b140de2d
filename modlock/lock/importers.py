"""Import manifest data into a LockAccumulator."""

from __future__ import annotations

import logging

from ..manifest import Manifest
from ..resolution.models import ResolvedDependency
from .accumulator import LockAccumulator
from .models import LockfileCommand
from .models import LockfileModule

logger = logging.getLogger(__name__)


def import_dependency(dependency: ResolvedDependency, accumulator: LockAccumulator) -> str | None:
    """Add a resolved dependency's module and commands to the accumulator.

    A manifest without a module contributes nothing: commands need an owning
    module, so any it declares are dropped.

    Returns:
        The module key inserted, or None when the manifest owns no module
    """
    manifest = dependency.manifest
    if manifest.module is None:
        if manifest.commands:
            logger.debug(f"Dropping {len(manifest.commands)} command(s) of moduleless dependency {dependency.name}")
        return None

    lockfile_module = LockfileModule.from_module(
        dependency.name,
        manifest.module,
        dependency.download_url,
        integrity=dependency.integrity,
        content_hash=dependency.content_hash,
    )
    key = lockfile_module.key
    accumulator.modules.insert(key, lockfile_module)

    for command in manifest.commands or []:
        accumulator.commands.insert(command.name, LockfileCommand(module=key))
    return key


def import_root_commands(manifest: Manifest, accumulator: LockAccumulator) -> None:
    """Bind the root manifest's commands to its own module.

    Must run after every dependency import so the project's own commands
    shadow same-named dependency commands.
    """
    key = manifest.module_key()
    if key is None or not manifest.commands:
        return

    for command in manifest.commands:
        accumulator.commands.insert(command.name, LockfileCommand(module=key))
