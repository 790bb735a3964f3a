"""Schema resolution for record types bound to worksheet rows."""

# Module responsibilities:
# - Merge programmatic overrides, declarative field tags and defaults into one
#   immutable FieldBinding per dataclass field.
# - Resolve each field's shape (scalar, optional, repeated) once from its type hint.
# - Memoize schemas per record type.

from __future__ import annotations

import dataclasses
import types
from collections.abc import Sequence as AbcSequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .errors import SchemaError

TAG_KEY = "xlsx"
TAG_SEPARATOR = ";"
IGNORE_TAG = "-"

COLUMN_KEY = "column"
ENCODING_KEY = "encoding"
SPLIT_KEY = "split"
DEFAULT_KEY = "default"
NIL_KEY = "nil"
REQUIRED_KEY = "req"
TAG_KEYS = frozenset({COLUMN_KEY, ENCODING_KEY, SPLIT_KEY, DEFAULT_KEY, NIL_KEY, REQUIRED_KEY})

OVERRIDE_HOOK = "xlsx_field_configs"


class FieldShape(str, Enum):
    SCALAR = "scalar"
    OPTIONAL = "optional"
    REPEATED = "repeated"


@dataclass(slots=True)
class FieldConfig:
    """Per-field configuration, returned by ``xlsx_field_configs()`` overrides.

    Attributes:
        column_name: Header text of the source column; defaults to the field name.
        default_value: Text scanned into the field before the row's cells.
        split: Delimiter turning one cell into a list of elements.
        encoding: ``"json"`` decodes the whole cell as one JSON payload.
        nil_value: Cell text meaning "leave the field alone".
        required: The column must exist in the header row.
        ignore: Exclude the field from the schema.
    """

    column_name: str = ""
    default_value: str = ""
    split: str = ""
    encoding: str = ""
    nil_value: str = ""
    required: bool = False
    ignore: bool = False


@dataclass(frozen=True, slots=True)
class FieldBinding:
    """Resolved, immutable binding of one record field to one column."""

    index: int
    name: str
    column_name: str
    default_value: str = ""
    split: str = ""
    encoding: str = ""
    nil_value: str = ""
    required: bool = False
    shape: FieldShape = FieldShape.SCALAR
    value_type: Any = str
    element_type: Any = None
    container: Optional[Callable[..., Any]] = None


@dataclass(frozen=True, slots=True)
class Schema:
    """Ordered field bindings for one record type."""

    record_type: type
    fields: Tuple[FieldBinding, ...]

    def field(self, name: str) -> FieldBinding:
        for binding in self.fields:
            if binding.name == name:
                return binding
        raise KeyError(name)


def _tag_param(param: str) -> Tuple[str, str]:
    # Expects `ColumnName`, `column(ColumnName)`, `default(0)`, `req` and so on.
    start = param.find("(")
    if start > 0 and param.endswith(")"):
        key = param[:start]
        if key in TAG_KEYS:
            return key, param[start + 1 : -1]
    if param == REQUIRED_KEY:
        return REQUIRED_KEY, ""
    return COLUMN_KEY, param


def parse_tag(value: str) -> FieldConfig:
    """Parse a ``"column(Name);default(0);req"`` style tag into a FieldConfig."""

    config = FieldConfig()
    for raw in value.split(TAG_SEPARATOR):
        param = raw.strip()
        if not param:
            continue
        key, param_value = _tag_param(param)
        if key == COLUMN_KEY:
            config.column_name = param_value
        elif key == DEFAULT_KEY:
            config.default_value = param_value
        elif key == SPLIT_KEY:
            config.split = param_value
        elif key == ENCODING_KEY:
            config.encoding = param_value
        elif key == NIL_KEY:
            config.nil_value = param_value
        elif key == REQUIRED_KEY:
            config.required = True
    return config


def resolve_shape(hint: Any) -> Tuple[FieldShape, Any, Any, Optional[Callable[..., Any]]]:
    origin = get_origin(hint)
    args = get_args(hint)

    if origin in (Union, types.UnionType) and type(None) in args:
        inner = tuple(arg for arg in args if arg is not type(None))
        value_type = inner[0] if len(inner) == 1 else Union[inner]
        return FieldShape.OPTIONAL, value_type, None, None

    if hint in (list, tuple):
        return FieldShape.REPEATED, hint, str, hint
    if origin is list:
        return FieldShape.REPEATED, hint, args[0] if args else str, list
    if origin is tuple:
        # Only homogeneous tuple[T, ...] can be filled from a split cell.
        element = args[0] if args and (len(args) == 1 or args[1] is Ellipsis) else Any
        return FieldShape.REPEATED, hint, element, tuple
    if origin is AbcSequence:
        return FieldShape.REPEATED, hint, args[0] if args else str, list

    if hint is Any:
        return FieldShape.SCALAR, str, None, None
    return FieldShape.SCALAR, hint, None, None


def _field_overrides(record_type: type) -> Mapping[str, FieldConfig]:
    hook = getattr(record_type, OVERRIDE_HOOK, None)
    if hook is None:
        return {}
    configs = hook()
    if not isinstance(configs, Mapping):
        raise SchemaError(
            f"{record_type.__name__}.{OVERRIDE_HOOK}() must return a mapping, got {type(configs).__name__}"
        )
    return configs


def _freeze(config: FieldConfig, index: int, name: str, hint: Any) -> FieldBinding:
    shape, value_type, element_type, container = resolve_shape(hint)
    return FieldBinding(
        index=index,
        name=name,
        column_name=config.column_name or name,
        default_value=config.default_value,
        split=config.split,
        encoding=config.encoding,
        nil_value=config.nil_value,
        required=config.required,
        shape=shape,
        value_type=value_type,
        element_type=element_type,
        container=container,
    )


@lru_cache(maxsize=None)
def build_schema(record_type: type) -> Schema:
    """Build the schema for a dataclass record type.

    Configuration precedence per field: an ``xlsx_field_configs()`` override,
    then the ``"xlsx"`` tag in the field's metadata, then the field name.

    Raises:
        SchemaError: When ``record_type`` is not a mutable dataclass, or its
            hints, tags or overrides cannot be resolved.
    """

    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise SchemaError(f"record type must be a dataclass, got {record_type!r}")
    if record_type.__dataclass_params__.frozen:
        # Rows are bound by assigning fields one cell at a time.
        raise SchemaError(f"record type {record_type.__name__} must not be a frozen dataclass")
    try:
        hints = get_type_hints(record_type)
        overrides = _field_overrides(record_type)
    except SchemaError:
        raise
    except Exception as exc:
        raise SchemaError(f"cannot resolve fields of {record_type.__name__}: {exc}") from exc

    bindings = []
    for index, field in enumerate(dataclasses.fields(record_type)):
        hint = hints.get(field.name, str)
        if field.name in overrides:
            config = overrides[field.name]
            if not isinstance(config, FieldConfig):
                raise SchemaError(
                    f"{record_type.__name__}.{OVERRIDE_HOOK}()[{field.name!r}] must be a FieldConfig, "
                    f"got {type(config).__name__}"
                )
            if config.ignore:
                continue
        elif TAG_KEY in field.metadata:
            tag = field.metadata[TAG_KEY]
            if not isinstance(tag, str):
                raise SchemaError(
                    f"{record_type.__name__}.{field.name} tag must be a string, got {type(tag).__name__}"
                )
            if tag == IGNORE_TAG:
                continue
            config = parse_tag(tag)
        else:
            config = FieldConfig()
        bindings.append(_freeze(config, index, field.name, hint))
    return Schema(record_type=record_type, fields=tuple(bindings))


def field_tag(tag: str, **kwargs: Any) -> Any:
    """Shorthand for ``dataclasses.field(metadata={"xlsx": tag}, **kwargs)``."""

    metadata: Dict[str, Any] = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_KEY] = tag
    return dataclasses.field(metadata=metadata, **kwargs)
