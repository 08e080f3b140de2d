"""Pydantic records stored in a lockfile."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from ..manifest import ManifestModule
from ..manifest import module_key


class LockfileModule(BaseModel):
    """A concrete, resolved module."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., description="Dependency name as declared")
    version: str = Field(..., description="Resolved version")
    source: str = Field(..., description="Source locator, e.g. 'registry+foo'")
    resolved: str = Field(..., description="Download URL the artifact was resolved to")
    integrity: str = Field(..., description="Integrity digest (may be empty)")
    hash: str = Field(..., description="Content hash (may be empty)")
    abi: str | None = Field(..., description="Binary interface kind, or null")
    entry: str = Field(..., description="Entry path of the module artifact")

    @classmethod
    def from_module(
        cls,
        name: str,
        module: ManifestModule,
        download_url: str,
        integrity: str = "",
        content_hash: str = "",
    ) -> LockfileModule:
        return cls(
            name=name,
            version=module.version,
            source=f"registry+{module.name}",
            resolved=download_url,
            integrity=integrity,
            hash=content_hash,
            abi=module.abi,
            entry=module.module,
        )

    @property
    def key(self) -> str:
        return module_key(self.name, self.version)


class LockfileCommand(BaseModel):
    """A command bound to the module key that implements it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    module: str = Field(..., description="Key of the owning module")
