"""Exceptions raised while binding worksheet rows to records."""


class SheetBindError(Exception):
    """Base error for the library."""


class ConfigError(SheetBindError):
    """Reader configuration is missing or invalid."""


class MalformedReferenceError(SheetBindError, ValueError):
    """A column reference cannot be decoded."""


class NoHeaderRowError(SheetBindError):
    """The token stream ended before a header row was complete."""


class HeaderResolutionError(SheetBindError):
    """Unexpected token or lookup failure while resolving the header row."""


class SchemaError(SheetBindError):
    """A record type cannot be turned into a schema."""


class MissingColumnError(SheetBindError):
    """A required column is absent from the header row."""

    def __init__(self, column: str) -> None:
        super().__init__(f'column "{column}" does not exist in the header row')
        self.column = column


class ConversionError(SheetBindError, ValueError):
    """Cell text cannot be converted into the field's type."""

    def __init__(self, message: str, *, column: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.column = column
        self.field = field


class BadDefaultError(ConversionError):
    """A configured default value fails conversion."""


class RowReadError(SheetBindError):
    """Unexpected token or lookup failure while reading a data row."""
