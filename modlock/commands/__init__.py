"""CLI commands for modlock."""

from .lock import check_cmd
from .lock import lock_cmd
from .show import show

__all__ = ["check_cmd", "lock_cmd", "show"]
