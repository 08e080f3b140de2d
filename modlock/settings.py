"""Settings for modlock, merged from settings.yaml scopes and the environment.

Scopes, lowest to highest precedence:
- User global (~/.modlock/settings.yaml)
- Project (<project>/.modlock/settings.yaml)
- Local (<project>/.modlock/settings.local.yaml)
- Environment (MODLOCK_REGISTRY_URL, MODLOCK_CACHE_DIR, MODLOCK_MAX_WORKERS)

Only the `lock:` section of each file is read::

    lock:
      registry_url: https://registry.example.com/api/v1
      max_workers: 4
      use_cache: true
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from .errors import SettingsError
from .resolution import DEFAULT_REGISTRY_URL
from .resolution import CachingResolver
from .resolution import DependencyResolver
from .resolution import RegistryResolver

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "MODLOCK_REGISTRY_URL": "registry_url",
    "MODLOCK_CACHE_DIR": "cache_dir",
    "MODLOCK_MAX_WORKERS": "max_workers",
}


class LockSettings(BaseModel):
    """Effective settings for lock reconciliation."""

    registry_url: str = Field(default=DEFAULT_REGISTRY_URL, description="Registry API base URL")
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".modlock" / "cache" / "resolutions",
        description="Directory for cached resolutions",
    )
    use_cache: bool = Field(default=True, description="Wrap the registry resolver in an on-disk cache")
    cache_ttl: int | None = Field(default=3600, ge=0, description="Cache entry lifetime in seconds")
    max_workers: int = Field(default=1, ge=1, description="Upper bound on concurrent resolver calls")
    strict_references: bool = Field(default=False, description="Reject dangling command references on load")
    timeout: float = Field(default=10.0, gt=0, description="Registry request timeout in seconds")


class SettingsManager:
    """Reads settings across user/project/local scopes."""

    def __init__(self, project_dir: Path | None = None, user_dir: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            project_dir: Project root holding .modlock/. Defaults to the current directory.
            user_dir: User settings directory (for testing). Defaults to ~/.modlock.
        """
        project_dir = Path(project_dir) if project_dir is not None else Path.cwd()
        user_dir = Path(user_dir) if user_dir is not None else Path.home() / ".modlock"

        self.user_settings_file = user_dir / "settings.yaml"
        self.project_settings_file = project_dir / ".modlock" / "settings.yaml"
        self.local_settings_file = project_dir / ".modlock" / "settings.local.yaml"

    def get_merged_settings(self) -> dict[str, Any]:
        """Merge the `lock` section of every scope; later scopes win."""
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings and isinstance(settings.get("lock"), dict):
                merged = self._deep_merge(merged, settings["lock"])
        return merged

    def load(self, environ: Mapping[str, str] | None = None) -> LockSettings:
        """Build effective settings, applying environment overrides last.

        Raises:
            SettingsError: Merged values fail validation
        """
        values = self.get_merged_settings()
        environ = os.environ if environ is None else environ
        for env_key, field_name in ENV_OVERRIDES.items():
            if env_value := environ.get(env_key):
                logger.debug(f"[settings] {field_name} <- ${env_key}")
                values[field_name] = env_value

        try:
            return LockSettings.model_validate(values)
        except ValidationError as e:
            raise SettingsError(f"Invalid modlock settings: {e}") from e

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from a YAML file; None when absent or unreadable."""
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: top level must be a mapping")
            return None
        return data

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_settings(project_dir: Path | None = None) -> LockSettings:
    return SettingsManager(project_dir).load()


def create_resolver(settings: LockSettings) -> DependencyResolver:
    """Build the resolver the settings ask for."""
    resolver: DependencyResolver = RegistryResolver(settings.registry_url, timeout=settings.timeout)
    if settings.use_cache:
        resolver = CachingResolver(resolver, settings.cache_dir, ttl=settings.cache_ttl)
    logger.debug(f"Using resolver {resolver!r}")
    return resolver
