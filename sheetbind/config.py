"""Reader configuration models and YAML loading."""

# Module responsibilities:
# - Describe how a worksheet is laid out (sheet, title row, skipped rows).
# - Choose the policy for per-cell conversion failures.
# - Load and validate the configuration from YAML files.

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

ErrorPolicy = Literal["raise", "collect"]


class ReaderConfig(BaseModel):
    """Layout and error-handling options for reading one worksheet.

    Attributes:
        sheet: Sheet name or zero-based index; ``None`` selects the active sheet.
        title_row_index: Zero-based row holding the header; earlier rows are skipped.
        skip: Number of data rows skipped after the header.
        prefix: Text stripped from the start of every header cell.
        suffix: Text stripped from the end of every header cell.
        on_conversion_error: ``"raise"`` stops at the first bad cell,
            ``"collect"`` keeps going and reports every failure per row.
    """

    model_config = ConfigDict(extra="forbid")

    sheet: Optional[Union[str, int]] = None
    title_row_index: int = Field(default=0, ge=0)
    skip: int = Field(default=0, ge=0)
    prefix: str = ""
    suffix: str = ""
    on_conversion_error: ErrorPolicy = "raise"


def load_reader_config(path: Path) -> ReaderConfig:
    """Load a reader configuration from a YAML file.

    Raises:
        FileNotFoundError: When the file does not exist.
        ConfigError: When the YAML is not a mapping or fails validation.
    """

    if not path.exists():
        raise FileNotFoundError(f"Reader config not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        payload = yaml.safe_load(fh)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigError("Invalid reader config YAML structure (expected mapping)")
    try:
        return ReaderConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid reader config {path}: {exc}") from exc
