"""Lockfile data model and reconciliation."""

from .accumulator import LockAccumulator
from .accumulator import LockTable
from .changes import resolve_changes
from .importers import import_dependency
from .importers import import_root_commands
from .io import LOCKFILE_HEADER
from .io import LOCKFILE_NAME
from .lockfile import Lockfile
from .lockfile import lockfile_exists
from .lockfile import reconcile
from .models import LockfileCommand
from .models import LockfileModule

__all__ = [
    "LOCKFILE_HEADER",
    "LOCKFILE_NAME",
    "LockAccumulator",
    "LockTable",
    "Lockfile",
    "LockfileCommand",
    "LockfileModule",
    "import_dependency",
    "import_root_commands",
    "lockfile_exists",
    "reconcile",
    "resolve_changes",
]
