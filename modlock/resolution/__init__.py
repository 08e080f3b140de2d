"""Dependency resolution capabilities.

Resolvers are injected into lockfile construction, never hard-wired:
- StaticResolver: fixed lookup table
- RegistryResolver: HTTP registry
- CachingResolver: on-disk cache wrapping another resolver
"""

from .cache import CachingResolver
from .models import ResolvedDependency
from .registry import DEFAULT_REGISTRY_URL
from .registry import RegistryResolver
from .resolvers import DependencyResolver
from .resolvers import StaticResolver
from .resolvers import resolve_all
from .resolvers import resolve_one

__all__ = [
    "DEFAULT_REGISTRY_URL",
    "CachingResolver",
    "DependencyResolver",
    "RegistryResolver",
    "ResolvedDependency",
    "StaticResolver",
    "resolve_all",
    "resolve_one",
]
