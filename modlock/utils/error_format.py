"""Error message formatting for CLI output.

Guarantees a non-empty message even for exceptions whose str() is empty
(e.g. TimeoutError), and escapes values before they reach Rich markup.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

from ..errors import ModlockError

FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Request timed out. The registry may be slow or unreachable.",
    ConnectionResetError: "Connection was reset by the server.",
    PermissionError: "Permission denied.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a useful display message.

    modlock's own errors already read as sentences, so their type name is
    never prefixed.

    Examples:
        >>> format_error_message(TimeoutError())
        'TimeoutError: Request timed out. The registry may be slow or unreachable.'

        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and not isinstance(e, ModlockError) and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}"

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
