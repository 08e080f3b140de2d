"""On-disk cache in front of another resolver."""

from __future__ import annotations

import contextlib
import hashlib
import json
import logging
import tempfile
from datetime import UTC
from datetime import datetime
from pathlib import Path

from ..errors import ManifestError
from .models import ResolvedDependency
from .resolvers import DependencyResolver

logger = logging.getLogger(__name__)


class CachingResolver:
    """Serve resolutions from a JSON file cache, falling back to an inner resolver.

    One file per (name, constraint) pair, named by a hash of the pair. Entries
    older than `ttl` seconds, or that fail to parse, are refetched.
    """

    def __init__(self, inner: DependencyResolver, cache_dir: Path, ttl: int | None = 3600):
        """Initialize caching resolver.

        Args:
            inner: Resolver consulted on cache miss
            cache_dir: Directory holding cache entries
            ttl: Entry lifetime in seconds; None keeps entries forever
        """
        self.inner = inner
        self.cache_dir = Path(cache_dir)
        self.ttl = ttl

    def cache_file(self, name: str, constraint: str) -> Path:
        cache_key = hashlib.sha256(f"{name}@{constraint}".encode()).hexdigest()[:16]
        return self.cache_dir / f"{cache_key}.json"

    def resolve(self, name: str, constraint: str) -> ResolvedDependency:
        cache_file = self.cache_file(name, constraint)
        if cached := self._load(cache_file, name, constraint):
            return cached

        dependency = self.inner.resolve(name, constraint)
        self._save(cache_file, name, constraint, dependency)
        return dependency

    def _load(self, cache_file: Path, name: str, constraint: str) -> ResolvedDependency | None:
        if not cache_file.exists():
            return None
        try:
            cache_data = json.loads(cache_file.read_text(encoding="utf-8"))
            if cache_data["name"] != name or cache_data["constraint"] != constraint:
                logger.debug(f"Cache key collision for {name} {constraint}, ignoring entry")
                return None
            if self.ttl is not None:
                fetched_at = datetime.fromisoformat(cache_data["fetched_at"])
                age = (datetime.now(UTC) - fetched_at).total_seconds()
                if age >= self.ttl:
                    logger.debug(f"Cache expired for {name} {constraint} (age: {age:.0f}s, ttl: {self.ttl}s)")
                    return None
            dependency = ResolvedDependency.from_payload(name, cache_data["dependency"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, ManifestError) as e:
            logger.warning(f"Cache entry {cache_file.name} corrupted, will resolve again: {e}")
            return None
        logger.debug(f"Using cached resolution for {name} {constraint}")
        return dependency

    def _save(self, cache_file: Path, name: str, constraint: str, dependency: ResolvedDependency) -> None:
        cache_data = {
            "name": name,
            "constraint": constraint,
            "fetched_at": datetime.now(UTC).isoformat(),
            "dependency": dependency.to_payload(),
        }
        temp_path: Path | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w", dir=self.cache_dir, prefix="entry_", suffix=".tmp", delete=False, encoding="utf-8"
            ) as tmp_file:
                temp_path = Path(tmp_file.name)
                json.dump(cache_data, tmp_file, indent=2)
            temp_path.replace(cache_file)
        except OSError as e:
            # A failed cache write never fails the resolution itself
            logger.warning(f"Failed to save cache entry for {name}: {e}")
            if temp_path is not None:
                with contextlib.suppress(OSError):
                    temp_path.unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"CachingResolver({self.inner!r}, {self.cache_dir})"
