"""The Lockfile aggregate: construction, reconciliation, lookup, persistence.

Contract:
- Inputs: a Manifest, optionally an existing Lockfile, and a DependencyResolver
- Outputs: a new Lockfile; existing values are never mutated
- Side Effects: resolver calls for changed dependencies; `save` writes LOCKFILE_NAME
- Errors: ResolutionError/ManifestError abort construction (no partial lockfile),
  NotFoundError subclasses on lookup misses, PersistenceError/LockfileFormatError on I/O
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from ..errors import CommandNotLockedError
from ..errors import DanglingCommandReferenceError
from ..errors import ModuleNotLockedError
from ..manifest import Manifest
from ..resolution.resolvers import DependencyResolver
from ..resolution.resolvers import resolve_all
from .accumulator import LockAccumulator
from .changes import resolve_changes
from .importers import import_dependency
from .importers import import_root_commands
from .io import LOCKFILE_NAME
from .io import parse_tables
from .io import read_tables
from .io import serialize_tables
from .io import write_text_atomic
from .models import LockfileCommand
from .models import LockfileModule

logger = logging.getLogger(__name__)


class Lockfile:
    """Fully resolved snapshot of a project's modules and commands.

    `modules` maps "<name> <version>" keys to LockfileModule records and
    `commands` maps globally unique command names to LockfileCommand records.
    Both are read-only views kept in key order.
    """

    def __init__(
        self,
        modules: Mapping[str, LockfileModule] | None = None,
        commands: Mapping[str, LockfileCommand] | None = None,
    ):
        self._modules = dict(sorted((modules or {}).items()))
        self._commands = dict(sorted((commands or {}).items()))

    @property
    def modules(self) -> Mapping[str, LockfileModule]:
        return MappingProxyType(self._modules)

    @property
    def commands(self) -> Mapping[str, LockfileCommand]:
        return MappingProxyType(self._commands)

    @classmethod
    def open(cls, directory: str | Path, *, strict: bool = False, own_module: str | None = None) -> Lockfile:
        """Load the lockfile stored in `directory`.

        Args:
            directory: Project directory containing LOCKFILE_NAME
            strict: Also fail when a command references a module key absent from the lockfile
            own_module: Key of the project's own module; commands bound to it are not dangling

        Raises:
            PersistenceError: Lockfile missing or unreadable
            LockfileFormatError: Malformed content
            DanglingCommandReferenceError: strict and a command reference is dangling
        """
        lock_path = Path(directory) / LOCKFILE_NAME
        modules, commands = read_tables(lock_path)
        lockfile = cls(modules, commands)
        if strict and (dangling := lockfile.dangling_commands(own_module)):
            raise DanglingCommandReferenceError(dangling, lock_path)
        logger.debug(f"Opened {lock_path}: {len(modules)} modules, {len(commands)} commands")
        return lockfile

    @classmethod
    def from_text(cls, raw: str) -> Lockfile:
        return cls(*parse_tables(raw))

    @classmethod
    def new_from_manifest(
        cls,
        manifest: Manifest,
        dependency_resolver: DependencyResolver,
        *,
        max_workers: int = 1,
    ) -> Lockfile:
        """Build a lockfile with no prior state. Every dependency is resolved.

        Raises:
            ManifestError: Malformed dependency declarations
            ResolutionError: Any dependency failed to resolve
        """
        dependencies = manifest.dependency_pairs()
        resolved = resolve_all(dependency_resolver, dependencies, max_workers=max_workers)

        accumulator = LockAccumulator()
        for dependency in resolved:
            import_dependency(dependency, accumulator)
        import_root_commands(manifest, accumulator)

        logger.info(f"Created lockfile from manifest: {len(resolved)} dependencies resolved")
        return cls._from_accumulator(accumulator)

    @classmethod
    def new_from_manifest_and_lockfile(
        cls,
        manifest: Manifest,
        existing_lockfile: Lockfile,
        dependency_resolver: DependencyResolver,
        *,
        max_workers: int = 1,
    ) -> Lockfile:
        """Reconcile a manifest against an existing lockfile.

        Dependencies whose "<name> <constraint>" key is already locked are
        carried over with their commands and never reach the resolver. All
        others are resolved again; commands of modules that changed are
        dropped unless the newly resolved manifest declares them again.

        Raises:
            ManifestError: Malformed dependency declarations
            ResolutionError: Any changed dependency failed to resolve
        """
        changed, unchanged = resolve_changes(manifest, existing_lockfile.modules)

        carried_commands = {
            name: command.model_copy()
            for name, command in existing_lockfile.commands.items()
            if command.module in unchanged
        }
        accumulator = LockAccumulator.seeded(unchanged, carried_commands)

        resolved = resolve_all(dependency_resolver, changed, max_workers=max_workers)
        for dependency in resolved:
            import_dependency(dependency, accumulator)
        import_root_commands(manifest, accumulator)

        logger.info(f"Reconciled lockfile: {len(unchanged)} unchanged, {len(changed)} re-resolved")
        return cls._from_accumulator(accumulator)

    @classmethod
    def _from_accumulator(cls, accumulator: LockAccumulator) -> Lockfile:
        return cls(accumulator.modules.to_dict(), accumulator.commands.to_dict())

    def to_text(self) -> str:
        return serialize_tables(self._modules, self._commands)

    def save(self, directory: str | Path) -> Path:
        """Write the lockfile into `directory`.

        Returns:
            Path of the written file

        Raises:
            PersistenceError: Unable to write the file
        """
        lock_path = Path(directory) / LOCKFILE_NAME
        write_text_atomic(lock_path, self.to_text())
        logger.info(f"Saved lockfile to {lock_path}")
        return lock_path

    def get_command(self, command_name: str) -> LockfileCommand:
        """Exact lookup of a command by name.

        Raises:
            CommandNotLockedError: No such command
        """
        try:
            return self._commands[command_name]
        except KeyError:
            raise CommandNotLockedError(command_name) from None

    def get_module(self, module_key: str) -> LockfileModule:
        """Exact lookup of a module by its "<name> <version>" key.

        Raises:
            ModuleNotLockedError: No such module
        """
        try:
            return self._modules[module_key]
        except KeyError:
            raise ModuleNotLockedError(module_key) from None

    def dangling_commands(self, own_module: str | None = None) -> dict[str, str]:
        """Commands whose module key is not present in this lockfile (name -> key).

        Root commands point at the project's own module, which is never stored in
        `modules`; pass its key as `own_module` to exclude them.
        """
        return {
            name: command.module
            for name, command in self._commands.items()
            if command.module not in self._modules and command.module != own_module
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lockfile):
            return NotImplemented
        return self._modules == other._modules and self._commands == other._commands

    def __repr__(self) -> str:
        return f"Lockfile(modules={len(self._modules)}, commands={len(self._commands)})"


def lockfile_exists(directory: str | Path) -> bool:
    return (Path(directory) / LOCKFILE_NAME).is_file()


def reconcile(
    directory: str | Path,
    dependency_resolver: DependencyResolver,
    *,
    manifest: Manifest | None = None,
    max_workers: int = 1,
    strict: bool = False,
) -> Lockfile:
    """Open-or-create reconciliation for a project directory.

    Builds from the manifest alone when no lockfile exists yet, otherwise
    reconciles against the stored one. Nothing is written; call `save`.

    Args:
        directory: Project directory
        dependency_resolver: Resolver for changed dependencies
        manifest: Already loaded manifest; read from `directory` when omitted
        max_workers: Upper bound on concurrent resolver calls
        strict: Open the existing lockfile in strict mode
    """
    if manifest is None:
        manifest = Manifest.open(directory)

    if not lockfile_exists(directory):
        logger.info(f"No {LOCKFILE_NAME} in {directory}, resolving all dependencies")
        return Lockfile.new_from_manifest(manifest, dependency_resolver, max_workers=max_workers)

    existing = Lockfile.open(directory, strict=strict, own_module=manifest.module_key())
    return Lockfile.new_from_manifest_and_lockfile(manifest, existing, dependency_resolver, max_workers=max_workers)
