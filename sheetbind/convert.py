"""Text-to-value conversion primitives."""

# Module responsibilities:
# - Provide the generic scan primitive that turns cell text into a scalar value.
# - Decode JSON-encoded payloads into arbitrary typed destinations.
# - Supply zero values for freshly created records.

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable

from pydantic import TypeAdapter, ValidationError

from .errors import ConversionError

ScanFunc = Callable[[str, Any], Any]

JSON_ENCODING = "json"


@lru_cache(maxsize=None)
def _adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else str(exc)


def scan_text(text: str, target_type: Any) -> Any:
    """Convert ``text`` into an instance of ``target_type``.

    ``str`` passes through untouched; numbers, booleans, decimals, dates,
    enums and the like are validated in lax mode.

    Raises:
        ConversionError: When the text is not valid for ``target_type``.
    """

    if target_type is str or target_type is Any:
        return text
    try:
        return _adapter(target_type).validate_python(text)
    except ValidationError as exc:
        raise ConversionError(
            f"cannot convert {text!r} to {getattr(target_type, '__name__', target_type)}: "
            f"{_first_error(exc)}"
        ) from exc


def decode_json(text: str, target_type: Any) -> Any:
    """Decode a JSON payload into ``target_type``."""

    try:
        return _adapter(target_type).validate_json(text)
    except ValidationError as exc:
        raise ConversionError(f"malformed JSON payload {text!r}: {_first_error(exc)}") from exc


def zero_value(target_type: Any) -> Any:
    """Return the value a field holds before any cell populates it."""

    try:
        return target_type()
    except TypeError:
        return None
