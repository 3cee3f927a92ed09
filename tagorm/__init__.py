"""Tag-driven model metadata and relationship resolution for dataclass models."""

from .core import (
    FieldMetadata,
    JoinTableHandler,
    MetadataError,
    ModelMetadata,
    ModelMetadataCache,
    ModelRegistry,
    RelationshipError,
    RelationshipKind,
    RelationshipMetadata,
    Scanner,
    Tabler,
    column_definition,
    column_matches,
    column_sql_type,
    parse_tag_setting,
    pluralize,
    to_db_name,
)
from .ports import Dialect, MySQLDialect, PostgresDialect, SQLiteDialect

__all__ = [
    "FieldMetadata",
    "JoinTableHandler",
    "MetadataError",
    "ModelMetadata",
    "ModelMetadataCache",
    "ModelRegistry",
    "RelationshipError",
    "RelationshipKind",
    "RelationshipMetadata",
    "Scanner",
    "Tabler",
    "column_definition",
    "column_matches",
    "column_sql_type",
    "parse_tag_setting",
    "pluralize",
    "to_db_name",
    "Dialect",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
]
