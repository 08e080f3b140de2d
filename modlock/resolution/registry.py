"""Registry-backed dependency resolver."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from ..errors import ManifestError
from ..errors import ResolutionError
from .models import ResolvedDependency

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.modlock.dev/api/v1"


class RegistryResolver:
    """Resolve dependencies against a package registry over HTTP.

    The registry answers ``GET {registry_url}/packages/{name}/{constraint}`` with a
    JSON object::

        {
            "download_url": "https://...",
            "integrity": "sha256-...",
            "hash": "...",
            "manifest": {"module": {...}, "command": [...]}
        }

    The registry, not this client, chooses which version satisfies a constraint.
    """

    def __init__(
        self,
        registry_url: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        """Initialize registry resolver.

        Args:
            registry_url: Base URL of the registry API. Defaults to DEFAULT_REGISTRY_URL.
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx client (transport, auth, proxies)
        """
        self.registry_url = (registry_url or DEFAULT_REGISTRY_URL).rstrip("/")
        self.timeout = timeout
        self._client = client

    def package_url(self, name: str, constraint: str) -> str:
        return f"{self.registry_url}/packages/{quote(name, safe='')}/{quote(constraint, safe='')}"

    def resolve(self, name: str, constraint: str) -> ResolvedDependency:
        """Fetch the manifest the registry selects for (name, constraint).

        Raises:
            ResolutionError: Network failure, non-2xx response, or malformed payload
        """
        url = self.package_url(name, constraint)
        logger.info(f"Resolving {name} {constraint} from registry")
        try:
            response = self._get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ResolutionError(name, constraint, f"registry returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach registry at {url}: {e}")
            raise ResolutionError(name, constraint, f"registry request failed: {e}") from e
        except ValueError as e:
            raise ResolutionError(name, constraint, "registry response is not valid JSON") from e

        try:
            return ResolvedDependency.from_payload(name, payload)
        except ManifestError as e:
            raise ResolutionError(name, constraint, str(e)) from e

    def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, timeout=self.timeout, follow_redirects=True)
        return httpx.get(url, timeout=self.timeout, follow_redirects=True)

    def __repr__(self) -> str:
        return f"RegistryResolver({self.registry_url})"
