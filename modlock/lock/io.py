"""Lockfile text format: header banner followed by key-sorted YAML."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from typing import TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError

from ..errors import LockfileFormatError
from ..errors import PersistenceError
from .models import LockfileCommand
from .models import LockfileModule

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "modlock.lock"
LOCKFILE_HEADER = (
    "# Lockfile v1\n"
    "# This file is automatically generated by modlock.\n"
    "# It is not intended for manual editing. The schema of this file may change."
)

SECTIONS = ("commands", "modules")

M = TypeVar("M", bound=BaseModel)

Tables = tuple[dict[str, LockfileModule], dict[str, LockfileCommand]]


def serialize_tables(
    modules: Mapping[str, LockfileModule],
    commands: Mapping[str, LockfileCommand],
) -> str:
    """Render both tables as header + YAML with every mapping key-sorted."""
    payload = {
        "modules": {key: module.model_dump() for key, module in modules.items()},
        "commands": {name: command.model_dump() for name, command in commands.items()},
    }
    body = yaml.safe_dump(payload, sort_keys=True, default_flow_style=False, allow_unicode=True)
    return f"{LOCKFILE_HEADER}\n{body}"


def parse_tables(raw: str, path: Path | None = None) -> Tables:
    """Parse lockfile text into (modules, commands). Comment lines are ignored.

    Raises:
        LockfileFormatError: Invalid YAML or content not matching the schema
    """
    try:
        payload = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise LockfileFormatError(f"Lockfile is not valid YAML: {e}", path) from e

    if not isinstance(payload, dict):
        raise LockfileFormatError("Lockfile must be a mapping with 'modules' and 'commands' sections", path)

    unknown = sorted(str(key) for key in payload if key not in SECTIONS)
    if unknown:
        raise LockfileFormatError(f"Unknown lockfile section(s): {', '.join(unknown)}", path)

    modules = {
        key: _validate(LockfileModule, "modules", key, record, path)
        for key, record in _section(payload, "modules", path).items()
    }
    commands = {
        name: _validate(LockfileCommand, "commands", name, record, path)
        for name, record in _section(payload, "commands", path).items()
    }
    return dict(sorted(modules.items())), dict(sorted(commands.items()))


def read_tables(lock_path: Path) -> Tables:
    """Read and parse a lockfile.

    Raises:
        PersistenceError: File missing or unreadable
        LockfileFormatError: Malformed content
    """
    try:
        raw = lock_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise PersistenceError(f"Lockfile does not exist: {lock_path}", lock_path) from e
    except UnicodeDecodeError as e:
        raise LockfileFormatError("Lockfile is not valid UTF-8 text", lock_path) from e
    except OSError as e:
        raise PersistenceError(f"Failed to read lockfile {lock_path}: {e}", lock_path) from e
    return parse_tables(raw, lock_path)


def write_text_atomic(target: Path, text: str) -> None:
    """Write `text` to a temp file beside `target` and rename it into place.

    Raises:
        PersistenceError: Directory missing or not writable
    """
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=target.parent, prefix=f".{target.name}_", suffix=".tmp", delete=False, encoding="utf-8"
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(text)
            tmp_file.flush()
        os.chmod(temp_path, _target_mode(target))
        temp_path.replace(target)
    except OSError as e:
        if temp_path is not None:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
        raise PersistenceError(f"Failed to write {target}: {e}", target) from e
    logger.debug(f"Wrote {target}")


def _target_mode(target: Path) -> int:
    """Permission bits for `target`: kept from the existing file, else 0666 minus the umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _section(payload: dict[Any, Any], name: str, path: Path | None) -> dict[str, Any]:
    section = payload.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise LockfileFormatError(f"Lockfile `{name}` section must be a mapping", path)
    for key in section:
        if not isinstance(key, str):
            raise LockfileFormatError(f"Lockfile `{name}` keys must be strings, got {key!r}", path)
    return section


def _validate(model: type[M], section: str, key: str, record: Any, path: Path | None) -> M:
    try:
        return model.model_validate(record)
    except ValidationError as e:
        raise LockfileFormatError(f"Invalid entry `{section}.{key}`: {e}", path) from e
