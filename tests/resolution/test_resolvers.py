"""Tests for StaticResolver and batch resolution."""

import threading

import pytest

from modlock.errors import ManifestError
from modlock.errors import ResolutionError
from modlock.resolution import DependencyResolver
from modlock.resolution import StaticResolver
from modlock.resolution import resolve_all
from modlock.resolution import resolve_one


class TestStaticResolver:
    def test_resolves_registered_entry(self, make_dependency):
        resolver = StaticResolver()
        foo = make_dependency("foo", "1.2.0")
        resolver.add("^1.0", foo)

        assert resolver.resolve("foo", "^1.0") is foo

    def test_miss_raises_resolution_error(self):
        with pytest.raises(ResolutionError) as exc_info:
            StaticResolver().resolve("foo", "1.0.0")

        assert exc_info.value.name == "foo"
        assert exc_info.value.constraint == "1.0.0"
        assert "not present" in str(exc_info.value)

    def test_satisfies_protocol(self):
        assert isinstance(StaticResolver(), DependencyResolver)


class TestResolveOne:
    def test_wraps_other_modlock_errors(self):
        class BrokenResolver:
            def resolve(self, name, constraint):
                raise ManifestError("bad manifest")

        with pytest.raises(ResolutionError, match="bad manifest") as exc_info:
            resolve_one(BrokenResolver(), "foo", "1.0.0")

        assert isinstance(exc_info.value.__cause__, ManifestError)

    def test_wraps_os_errors(self):
        class OfflineResolver:
            def resolve(self, name, constraint):
                raise ConnectionRefusedError("offline")

        with pytest.raises(ResolutionError, match="offline"):
            resolve_one(OfflineResolver(), "foo", "1.0.0")


class TestResolveAll:
    def test_empty_batch(self, exploding_resolver):
        assert resolve_all(exploding_resolver, [], max_workers=4) == []
        assert exploding_resolver.calls == []

    @pytest.mark.parametrize("max_workers", [1, 2, 8])
    def test_results_follow_declared_order(self, make_dependency, max_workers):
        resolver = StaticResolver()
        names = ["delta", "alpha", "charlie", "bravo"]
        for name in names:
            resolver.add("1.0.0", make_dependency(name, "1.0.0"))

        resolved = resolve_all(resolver, [(name, "1.0.0") for name in names], max_workers=max_workers)

        assert [dependency.name for dependency in resolved] == names

    def test_runs_concurrently(self, make_dependency):
        barrier = threading.Barrier(3, timeout=5)

        class BarrierResolver:
            def resolve(self, name, constraint):
                # Every call blocks until all three are in flight
                barrier.wait()
                return make_dependency(name, constraint)

        resolved = resolve_all(BarrierResolver(), [("a", "1"), ("b", "1"), ("c", "1")], max_workers=3)

        assert [dependency.name for dependency in resolved] == ["a", "b", "c"]

    def test_failure_propagates(self, make_dependency):
        resolver = StaticResolver()
        resolver.add("1.0.0", make_dependency("foo", "1.0.0"))

        with pytest.raises(ResolutionError, match="missing"):
            resolve_all(resolver, [("foo", "1.0.0"), ("missing", "1.0.0")], max_workers=2)

    def test_sequential_stops_at_first_failure(self, exploding_resolver):
        with pytest.raises(ResolutionError):
            resolve_all(exploding_resolver, [("a", "1"), ("b", "1")], max_workers=1)

        assert exploding_resolver.calls == [("a", "1")]

    def test_unexpected_error_cancels_queued_calls(self, make_dependency):
        calls: list[str] = []
        lock = threading.Lock()

        class FailingFirstResolver:
            def resolve(self, name, constraint):
                with lock:
                    calls.append(name)
                if name == "first":
                    raise RuntimeError("resolver bug")
                # Hold the other worker so the rest of the batch stays queued
                threading.Event().wait(0.2)
                return make_dependency(name, constraint)

        dependencies = [("first", "1"), *[(f"dep{i}", "1") for i in range(20)]]

        with pytest.raises(RuntimeError, match="resolver bug"):
            resolve_all(FailingFirstResolver(), dependencies, max_workers=2)

        assert len(calls) < len(dependencies)
