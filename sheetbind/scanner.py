"""Per-cell conversion of text into record fields."""

# Module responsibilities:
# - Apply one FieldBinding to one cell's text, writing the converted value
#   onto the destination record.
# - Scan configured default values, treating a faulty default as a configuration error.

from __future__ import annotations

from typing import Any

from .convert import JSON_ENCODING, ScanFunc, decode_json, scan_text
from .errors import BadDefaultError, ConversionError
from .schema import FieldBinding, FieldShape

_MISSING = object()


def _scan_value(binding: FieldBinding, text: str, target_type: Any, scan: ScanFunc) -> Any:
    if binding.encoding == JSON_ENCODING:
        return decode_json(text, target_type)
    return scan(text, target_type)


def _convert(binding: FieldBinding, text: str, scan: ScanFunc) -> Any:
    if binding.shape is FieldShape.REPEATED:
        if binding.split and text:
            elements = text.split(binding.split)
            return binding.container(scan(element, binding.element_type) for element in elements)
        if binding.encoding == JSON_ENCODING:
            return decode_json(text, binding.value_type)
        return _MISSING
    # OPTIONAL and SCALAR both land on value_type; an optional is simply
    # populated once a non-nil cell arrives.
    return _scan_value(binding, text, binding.value_type, scan)


def scan_cell(binding: FieldBinding, text: str, record: Any, *, scan: ScanFunc = scan_text) -> None:
    """Convert ``text`` per ``binding`` and assign it onto ``record``.

    Text equal to the binding's nil sentinel leaves the field untouched, as
    does a repeated field with neither a split delimiter nor JSON encoding.

    Raises:
        ConversionError: When the text cannot be converted, tagged with the
            binding's column and field names.
    """

    if text == binding.nil_value:
        return
    try:
        value = _convert(binding, text, scan)
    except ConversionError as exc:
        exc.column = binding.column_name
        exc.field = binding.name
        raise
    except (ValueError, TypeError) as exc:
        # Custom scan functions report failures with plain built-in errors.
        raise ConversionError(
            f"cannot convert {text!r} for field {binding.name!r}: {exc}",
            column=binding.column_name,
            field=binding.name,
        ) from exc
    if value is not _MISSING:
        setattr(record, binding.name, value)


def scan_default(binding: FieldBinding, record: Any, *, scan: ScanFunc = scan_text) -> None:
    """Scan the binding's default value onto ``record``.

    Conversion failures are ignored when no default is configured.

    Raises:
        BadDefaultError: When a configured default cannot be converted.
    """

    try:
        scan_cell(binding, binding.default_value, record, scan=scan)
    except ConversionError as exc:
        if binding.default_value:
            raise BadDefaultError(
                f"default {binding.default_value!r} for field {binding.name!r} is invalid: {exc}",
                column=binding.column_name,
                field=binding.name,
            ) from exc
