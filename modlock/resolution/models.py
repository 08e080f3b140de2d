"""Resolver output model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from ..errors import ManifestError
from ..manifest import Manifest


class ResolvedDependency(BaseModel):
    """A dependency resolved to a concrete manifest and download location.

    Attributes:
        name: Dependency name as declared by the depending manifest
        manifest: The resolved package's own manifest
        download_url: Where the package artifact can be fetched from
        integrity: Integrity digest reported by the registry (empty when unknown)
        content_hash: Content hash reported by the registry (empty when unknown)
    """

    model_config = ConfigDict(frozen=True)

    name: str
    manifest: Manifest
    download_url: str = ""
    integrity: str = Field(default="", description="Integrity digest, e.g. 'sha256-...'")
    content_hash: str = Field(default="", description="Content hash of the artifact")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the registry JSON shape."""
        return {
            "name": self.name,
            "download_url": self.download_url,
            "integrity": self.integrity,
            "hash": self.content_hash,
            "manifest": self.manifest.model_dump(by_alias=True, exclude_none=True),
        }

    @classmethod
    def from_payload(cls, name: str, payload: Any) -> ResolvedDependency:
        """Build from a registry JSON payload.

        Raises:
            ManifestError: Payload is not a mapping or carries an invalid manifest
        """
        if not isinstance(payload, Mapping):
            raise ManifestError("Registry payload must be a JSON object")
        manifest_data = payload.get("manifest")
        if not isinstance(manifest_data, Mapping):
            raise ManifestError("Registry payload is missing its 'manifest' object")
        download_url = payload.get("download_url", "")
        if not isinstance(download_url, str):
            raise ManifestError("Registry payload 'download_url' must be a string")
        return cls(
            name=name,
            manifest=Manifest.from_dict(manifest_data),
            download_url=download_url,
            integrity=str(payload.get("integrity") or ""),
            content_hash=str(payload.get("hash") or ""),
        )
