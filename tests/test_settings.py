"""Tests for settings scopes, environment overrides, and resolver creation."""

import pytest
import yaml

from modlock.errors import SettingsError
from modlock.resolution import DEFAULT_REGISTRY_URL
from modlock.resolution import CachingResolver
from modlock.resolution import RegistryResolver
from modlock.settings import SettingsManager
from modlock.settings import create_resolver


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


@pytest.fixture
def manager(tmp_path):
    return SettingsManager(project_dir=tmp_path / "project", user_dir=tmp_path / "user")


def test_defaults_without_files(manager):
    settings = manager.load(environ={})

    assert settings.registry_url == DEFAULT_REGISTRY_URL
    assert settings.max_workers == 1
    assert settings.use_cache is True
    assert settings.strict_references is False


def test_scopes_merge_in_precedence_order(manager):
    _write(manager.user_settings_file, {"lock": {"registry_url": "https://user.test", "max_workers": 2}})
    _write(manager.project_settings_file, {"lock": {"max_workers": 4, "strict_references": True}})
    _write(manager.local_settings_file, {"lock": {"max_workers": 8}})

    settings = manager.load(environ={})

    assert settings.registry_url == "https://user.test"
    assert settings.max_workers == 8
    assert settings.strict_references is True


def test_environment_overrides_files(manager, tmp_path):
    _write(manager.project_settings_file, {"lock": {"registry_url": "https://project.test", "max_workers": 2}})

    settings = manager.load(
        environ={
            "MODLOCK_REGISTRY_URL": "https://env.test",
            "MODLOCK_MAX_WORKERS": "6",
            "MODLOCK_CACHE_DIR": str(tmp_path / "env-cache"),
        }
    )

    assert settings.registry_url == "https://env.test"
    assert settings.max_workers == 6
    assert settings.cache_dir == tmp_path / "env-cache"


def test_other_sections_are_ignored(manager):
    _write(manager.project_settings_file, {"registry": {"max_workers": 9}})

    assert manager.load(environ={}).max_workers == 1


def test_unreadable_yaml_is_skipped(manager):
    manager.project_settings_file.parent.mkdir(parents=True)
    manager.project_settings_file.write_text("lock: [unclosed\n", encoding="utf-8")

    assert manager.load(environ={}).registry_url == DEFAULT_REGISTRY_URL


@pytest.mark.parametrize("values", [{"max_workers": 0}, {"timeout": -1}, {"max_workers": "many"}])
def test_invalid_values_raise(manager, values):
    _write(manager.project_settings_file, {"lock": values})

    with pytest.raises(SettingsError):
        manager.load(environ={})


def test_create_resolver_with_cache(manager, tmp_path):
    settings = manager.load(environ={"MODLOCK_CACHE_DIR": str(tmp_path / "cache")})

    resolver = create_resolver(settings)

    assert isinstance(resolver, CachingResolver)
    assert isinstance(resolver.inner, RegistryResolver)
    assert resolver.cache_dir == tmp_path / "cache"


def test_create_resolver_without_cache(manager):
    _write(manager.project_settings_file, {"lock": {"use_cache": False, "registry_url": "https://r.test/api/"}})

    resolver = create_resolver(manager.load(environ={}))

    assert isinstance(resolver, RegistryResolver)
    assert resolver.registry_url == "https://r.test/api"
