"""Error types raised by modlock.

Every error derives from ModlockError so callers (and the CLI) can catch
the whole family in one place and branch on the concrete type when needed.
"""

from __future__ import annotations

from pathlib import Path


class ModlockError(Exception):
    """Base class for all modlock errors."""


class NotFoundError(ModlockError):
    """Raised when a lookup in a lockfile misses.

    Attributes:
        name: The exact identifier that was requested
    """

    kind = "Entry"

    def __init__(self, name: str):
        super().__init__(f"{self.kind} not found: {name}")
        self.name = name


class ModuleNotLockedError(NotFoundError):
    """No module with the requested key exists in the lockfile."""

    kind = "Module"


class CommandNotLockedError(NotFoundError):
    """No command with the requested name exists in the lockfile."""

    kind = "Command"


class ResolutionError(ModlockError):
    """A resolver could not turn (name, constraint) into a dependency."""

    def __init__(self, name: str, constraint: str, reason: str | None = None):
        message = f"Failed to resolve dependency '{name}' ({constraint})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name
        self.constraint = constraint
        self.reason = reason


class PersistenceError(ModlockError):
    """Reading or writing a lock or cache file failed at the I/O level."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class LockfileFormatError(ModlockError):
    """A persisted lockfile could not be parsed."""

    def __init__(self, message: str, path: Path | None = None):
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)
        self.path = path


class ManifestError(ModlockError):
    """A manifest is missing, unparsable, or declares malformed dependencies."""


class SettingsError(ModlockError):
    """Configuration values failed validation."""


class DanglingCommandReferenceError(LockfileFormatError):
    """Commands reference module keys absent from the same lockfile.

    Only raised when a lockfile is opened in strict mode.

    Attributes:
        references: Mapping of command name to the missing module key
    """

    def __init__(self, references: dict[str, str], path: Path | None = None):
        listed = ", ".join(f"{name} -> {key}" for name, key in sorted(references.items()))
        super().__init__(f"Commands reference unknown modules: {listed}", path)
        self.references = dict(references)


__all__ = [
    "CommandNotLockedError",
    "DanglingCommandReferenceError",
    "LockfileFormatError",
    "ManifestError",
    "ModlockError",
    "ModuleNotLockedError",
    "NotFoundError",
    "PersistenceError",
    "ResolutionError",
    "SettingsError",
]
