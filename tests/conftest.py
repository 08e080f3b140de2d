"""Shared fixtures for modlock tests."""

from textwrap import dedent

import pytest

from modlock.errors import ResolutionError
from modlock.manifest import Manifest
from modlock.manifest import ManifestCommand
from modlock.manifest import ManifestModule
from modlock.resolution import ResolvedDependency


class ExplodingResolver:
    """Resolver that fails every call and records what was asked."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def resolve(self, name: str, constraint: str) -> ResolvedDependency:
        self.calls.append((name, constraint))
        raise ResolutionError(name, constraint, "resolver must not be called")


@pytest.fixture
def make_dependency():
    """Factory for ResolvedDependency values with a module and optional commands."""

    def _make(
        name: str,
        version: str,
        commands: tuple[str, ...] = (),
        entry: str | None = None,
        download_url: str = "",
        with_module: bool = True,
    ) -> ResolvedDependency:
        module = (
            ManifestModule(name=name, version=version, module=entry or f"{name}.wasm", description="")
            if with_module
            else None
        )
        manifest = Manifest(
            module=module,
            commands=[ManifestCommand(name=c) for c in commands] or None,
        )
        return ResolvedDependency(name=name, manifest=manifest, download_url=download_url)

    return _make


@pytest.fixture
def exploding_resolver():
    return ExplodingResolver()


@pytest.fixture
def foo_bar_lock_text():
    """Existing lockfile: foo 1.0.0 and bar 2.0.1, do_foo_stuff bound to foo."""
    return dedent("""
        # Lockfile v1
        modules:
          foo 1.0.0:
            name: foo
            version: 1.0.0
            source: registry+foo
            resolved: ""
            integrity: ""
            hash: ""
            abi: null
            entry: foo.wasm
          bar 2.0.1:
            name: bar
            version: 2.0.1
            source: registry+bar
            resolved: ""
            integrity: ""
            hash: ""
            abi: null
            entry: bar.wasm
        commands:
          do_foo_stuff:
            module: foo 1.0.0
    """)
