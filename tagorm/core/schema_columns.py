"""Column type helpers derived from field metadata and tag settings."""

from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from typing import Any

from .contracts import is_scanner_type
from .fields import resolve_field_types, unwrap_optional
from .models import FieldMetadata
from ..ports.dialects import Dialect

LOG = logging.getLogger(__name__)

DEFAULT_SIZE = 255


def column_sql_type(field: FieldMetadata, dialect: Dialect) -> str:
    """Build the column type of one field, including tag-declared extras.

    A `TYPE` tag wins over the dialect mapping. `NOT NULL`, `UNIQUE` and
    `DEFAULT` tags are appended in that order.
    """

    settings = field.tag_settings
    sql_type = settings.get("TYPE", "")

    additional = settings.get("NOT NULL", "") + " " + settings.get("UNIQUE", "")
    if "DEFAULT" in settings:
        additional += " DEFAULT " + settings["DEFAULT"]

    if not sql_type:
        size = _size(field)
        auto_increment = field.is_auto_increment or field.is_primary_key
        sql_type = dialect.sql_type(_storage_type(field), size, auto_increment)
        if settings:
            LOG.warning("Field %s has tag settings but no type; derived %r", field.name, sql_type)

    if not additional.strip():
        return sql_type
    return f"{sql_type} {additional}"


def column_definition(field: FieldMetadata, dialect: Dialect) -> str:
    """Build one `"column" type` fragment."""

    return f"{dialect.q(field.column_name)} {column_sql_type(field, dialect)}"


def column_matches(field: FieldMetadata, definition: str, dialect: Dialect) -> bool:
    """Compare a field with an existing column definition, word by word.

    Comparison is case-insensitive and stops at the shorter of the two.
    Fields tagged `IGNORE_MIGRATE` always match.
    """

    if "IGNORE_MIGRATE" in field.tag_settings:
        return True
    expected = column_sql_type(field, dialect).upper().split()
    actual = definition.upper().split()
    return all(left == right for left, right in zip(expected, actual))


def _size(field: FieldMetadata) -> int:
    raw = field.tag_settings.get("SIZE")
    if raw is None:
        return DEFAULT_SIZE
    try:
        return int(raw)
    except ValueError:
        LOG.warning("Field %s has invalid size %r; using 0", field.name, raw)
        return 0


def _storage_type(field: FieldMetadata) -> Any:
    python_type = unwrap_optional(field.type)
    if field.is_scanner:
        # Scanner structs are stored as their first field.
        while is_scanner_type(python_type) and is_dataclass(python_type) and fields(python_type):
            first = fields(python_type)[0]
            python_type = unwrap_optional(resolve_field_types(python_type).get(first.name, first.type))
    return python_type
