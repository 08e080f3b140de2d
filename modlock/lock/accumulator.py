"""Key-ordered tables and the accumulator threaded through a reconciliation.

Overwrite on insert is the merge policy: re-importing a module is idempotent,
and a later command import shadows an earlier one with the same name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Generic
from typing import TypeVar

from .models import LockfileCommand
from .models import LockfileModule

logger = logging.getLogger(__name__)

V = TypeVar("V")


class LockTable(Generic[V]):
    """Map with documented overwrite-on-insert semantics and key-sorted iteration."""

    def __init__(self, label: str, entries: Mapping[str, V] | None = None):
        self.label = label
        self._entries: dict[str, V] = dict(entries or {})

    def insert(self, key: str, value: V) -> V | None:
        """Insert `value` under `key`, replacing any existing entry.

        Returns:
            The replaced value, or None if the key was new
        """
        previous = self._entries.get(key)
        self._entries[key] = value
        if previous is not None and previous != value:
            logger.debug(f"[{self.label}] {key} overwritten: {previous!r} -> {value!r}")
        return previous

    def get(self, key: str) -> V | None:
        return self._entries.get(key)

    def items(self) -> list[tuple[str, V]]:
        return sorted(self._entries.items())

    def to_dict(self) -> dict[str, V]:
        """Key-sorted copy of the table."""
        return dict(self.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LockTable({self.label}, {len(self._entries)} entries)"


@dataclass
class LockAccumulator:
    """Module and command tables being assembled by a single construction call."""

    modules: LockTable[LockfileModule] = field(default_factory=lambda: LockTable("modules"))
    commands: LockTable[LockfileCommand] = field(default_factory=lambda: LockTable("commands"))

    @classmethod
    def seeded(
        cls,
        modules: Mapping[str, LockfileModule],
        commands: Mapping[str, LockfileCommand],
    ) -> LockAccumulator:
        return cls(modules=LockTable("modules", modules), commands=LockTable("commands", commands))
