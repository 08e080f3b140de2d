"""Pydantic schema and reader for project manifests (modlock.toml)."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from .errors import ManifestError

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "modlock.toml"


class ManifestModule(BaseModel):
    """The module a manifest owns."""

    name: str = Field(..., description="Module name")
    version: str = Field(..., description="Concrete version of this module")
    module: str = Field(..., description="Entry path of the compiled module artifact")
    description: str = Field(default="", description="Human-readable description")
    abi: str | None = Field(None, description="Binary interface kind (e.g. 'wasi'), if any")


class ManifestCommand(BaseModel):
    """A command exported by the manifest's module."""

    name: str = Field(..., description="Globally unique command name")


class Manifest(BaseModel):
    """Project metadata: owned module, exported commands, and dependency constraints.

    TOML layout::

        [module]
        name = "app"
        version = "1.0.0"
        module = "target/app.wasm"

        [[command]]
        name = "app-run"

        [dependencies]
        foo = "1.0.2"
    """

    model_config = ConfigDict(populate_by_name=True)

    module: ManifestModule | None = Field(None, description="Owned module, if any")
    commands: list[ManifestCommand] | None = Field(None, alias="command", description="Exported commands")
    dependencies: dict[str, Any] | None = Field(
        None, description="Dependency name -> literal version constraint string"
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Manifest:
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest: {e}") from e

    @classmethod
    def from_toml(cls, text: str) -> Manifest:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ManifestError(f"Manifest is not valid TOML: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def open(cls, directory: str | Path) -> Manifest:
        """Read the manifest file from a project directory.

        Raises:
            ManifestError: File missing, unreadable, or invalid
        """
        manifest_path = Path(directory) / MANIFEST_FILE_NAME
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ManifestError(f"No {MANIFEST_FILE_NAME} found in {directory}") from e
        except OSError as e:
            raise ManifestError(f"Failed to read {manifest_path}: {e}") from e
        logger.debug(f"Loaded manifest from {manifest_path}")
        return cls.from_toml(text)

    def module_key(self) -> str | None:
        """Lock key of the owned module, or None when the manifest owns no module."""
        if self.module is None:
            return None
        return module_key(self.module.name, self.module.version)

    def dependency_pairs(self) -> list[tuple[str, str]]:
        """Declared dependencies as (name, constraint) pairs, in declared order."""
        if self.dependencies is None:
            return []
        return extract_dependencies(self.dependencies)


def module_key(name: str, version: str) -> str:
    """Lock key of a module: name and version joined by a single space."""
    return f"{name} {version}"


def extract_dependencies(dependencies: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Turn a dependency table into (name, constraint) pairs.

    Constraints are kept verbatim; they are opaque strings here.

    Raises:
        ManifestError: A name is empty or contains whitespace, or a constraint is not a string
    """
    pairs: list[tuple[str, str]] = []
    for name, constraint in dependencies.items():
        if not isinstance(name, str) or not name or any(ch.isspace() for ch in name):
            raise ManifestError(f"Invalid dependency name: {name!r}")
        if not isinstance(constraint, str) or not constraint.strip():
            raise ManifestError(
                f"Dependency '{name}' must declare its version constraint as a non-empty string, "
                f"got {constraint!r}"
            )
        pairs.append((name, constraint))
    return pairs


__all__ = [
    "MANIFEST_FILE_NAME",
    "Manifest",
    "ManifestCommand",
    "ManifestModule",
    "extract_dependencies",
    "module_key",
]
