"""Public core API for model metadata resolution."""

from .cache import FieldPatch, ModelMetadataCache
from .contracts import Scanner, Tabler, TableNameHandler, is_scanner_type, is_timestamp_type
from .errors import MetadataError, RelationshipError
from .fields import TypeInfo, TypeKind, classify_type
from .join_table import JoinTableForeignKey, JoinTableHandler, JoinTableSource, setup_join_table
from .metadata import ModelRegistry, ResolutionSession, model_type_of, resolve_table_name
from .models import (
    FieldMetadata,
    ModelMetadata,
    RelationshipKind,
    RelationshipMetadata,
    find_field,
)
from .naming import PLURAL_RULES, default_table_name, pluralize, to_db_name
from .schema_columns import column_definition, column_matches, column_sql_type
from .tags import field_tag_settings, is_ignored_tag, parse_tag_setting

__all__ = [
    "FieldMetadata",
    "FieldPatch",
    "JoinTableForeignKey",
    "JoinTableHandler",
    "JoinTableSource",
    "MetadataError",
    "ModelMetadata",
    "ModelMetadataCache",
    "ModelRegistry",
    "PLURAL_RULES",
    "RelationshipError",
    "RelationshipKind",
    "RelationshipMetadata",
    "ResolutionSession",
    "Scanner",
    "Tabler",
    "TableNameHandler",
    "TypeInfo",
    "TypeKind",
    "classify_type",
    "column_definition",
    "column_matches",
    "column_sql_type",
    "default_table_name",
    "field_tag_settings",
    "find_field",
    "is_ignored_tag",
    "is_scanner_type",
    "is_timestamp_type",
    "model_type_of",
    "parse_tag_setting",
    "pluralize",
    "resolve_table_name",
    "setup_join_table",
    "to_db_name",
]
