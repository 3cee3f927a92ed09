"""Metadata types describing a model's columns and associations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple

from .naming import to_db_name

if TYPE_CHECKING:
    from .join_table import JoinTableHandler

SOFT_DELETE_COLUMN = "deleted_at"


class RelationshipKind(str, Enum):
    """Supported association kinds."""

    HAS_ONE = "has_one"
    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    MANY_TO_MANY = "many_to_many"


@dataclass(frozen=True)
class RelationshipMetadata:
    """Resolved association attached to one relationship field."""

    kind: RelationshipKind
    foreign_field_name: str = ""
    foreign_column_name: str = ""
    association_foreign_field_name: str = ""
    association_foreign_column_name: str = ""
    polymorphic_type_field_name: str = ""
    polymorphic_type_column_name: str = ""
    polymorphic_value: str = ""
    join_table: Optional["JoinTableHandler"] = None

    @property
    def is_polymorphic(self) -> bool:
        return bool(self.polymorphic_type_field_name)


@dataclass
class FieldMetadata:
    """Column-level description of one exported model field.

    Flags are independent; a belongs-to key is both `is_normal` and
    `is_foreign_key`. Relationship fields are never normal.
    """

    name: str
    name_chain: Tuple[str, ...]
    column_name: str = ""
    type: Any = None
    tag_settings: Dict[str, str] = field(default_factory=dict)
    is_primary_key: bool = False
    is_normal: bool = False
    is_ignored: bool = False
    is_scanner: bool = False
    has_default_value: bool = False
    is_auto_increment: bool = False
    is_foreign_key: bool = False
    anonymous: bool = False
    relationship: Optional[RelationshipMetadata] = None

    def clone(self) -> "FieldMetadata":
        return replace(self, tag_settings=dict(self.tag_settings))

    def matches(self, name: str) -> bool:
        """Match by identifier or by the column name `name` resolves to."""

        return self.name == name or self.column_name == to_db_name(name)


@dataclass(frozen=True)
class ModelMetadata:
    """Resolved description of one model type.

    `table_name` is the raw name; registry hooks are applied on lookup by
    `ModelRegistry.table_name`.
    """

    model_type: Optional[type]
    table_name: str = ""
    fields: Tuple[FieldMetadata, ...] = ()
    primary_key_fields: Tuple[FieldMetadata, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def column_names(self) -> list[str]:
        """Columns written for this model, in field order."""

        return [f.column_name for f in self.fields if f.is_normal and not f.is_ignored]

    @property
    def relationships(self) -> Dict[str, RelationshipMetadata]:
        return {f.name: f.relationship for f in self.fields if f.relationship is not None}

    @property
    def soft_delete(self) -> bool:
        """True when rows are soft-deleted through a `deleted_at` column."""

        return self.has_column(SOFT_DELETE_COLUMN)

    def field(self, name: str) -> Optional[FieldMetadata]:
        """Return the first field matching `name` by identifier or column."""

        return find_field(name, self.fields)

    def has_column(self, name: str) -> bool:
        found = self.field(name)
        return found is not None and not found.is_ignored and found.relationship is None

    def field_by_chain(self, name_chain: Tuple[str, ...]) -> Optional[FieldMetadata]:
        for candidate in self.fields:
            if candidate.name_chain == name_chain:
                return candidate
        return None


def find_field(name: str, fields: Sequence[FieldMetadata]) -> Optional[FieldMetadata]:
    for candidate in fields:
        if candidate.matches(name):
            return candidate
    return None
