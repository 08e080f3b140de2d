"""modlock - dependency lock reconciliation for module packages.

Public API:
- Manifest: project manifest (modlock.toml)
- Lockfile: resolved modules and commands (modlock.lock)
- reconcile: open-or-create reconciliation for a project directory
- DependencyResolver and its StaticResolver, RegistryResolver, CachingResolver variants
"""

__version__ = "0.3.0"

from .errors import CommandNotLockedError  # noqa: E402
from .errors import DanglingCommandReferenceError  # noqa: E402
from .errors import LockfileFormatError  # noqa: E402
from .errors import ManifestError  # noqa: E402
from .errors import ModlockError  # noqa: E402
from .errors import ModuleNotLockedError  # noqa: E402
from .errors import NotFoundError  # noqa: E402
from .errors import PersistenceError  # noqa: E402
from .errors import ResolutionError  # noqa: E402
from .lock import Lockfile  # noqa: E402
from .lock import LockfileCommand  # noqa: E402
from .lock import LockfileModule  # noqa: E402
from .lock import reconcile  # noqa: E402
from .manifest import Manifest  # noqa: E402
from .resolution import CachingResolver  # noqa: E402
from .resolution import DependencyResolver  # noqa: E402
from .resolution import RegistryResolver  # noqa: E402
from .resolution import ResolvedDependency  # noqa: E402
from .resolution import StaticResolver  # noqa: E402

__all__ = [
    "__version__",
    "CachingResolver",
    "CommandNotLockedError",
    "DanglingCommandReferenceError",
    "DependencyResolver",
    "LockfileFormatError",
    "Lockfile",
    "LockfileCommand",
    "LockfileModule",
    "Manifest",
    "ManifestError",
    "ModlockError",
    "ModuleNotLockedError",
    "NotFoundError",
    "PersistenceError",
    "RegistryResolver",
    "ResolutionError",
    "ResolvedDependency",
    "StaticResolver",
    "reconcile",
]
