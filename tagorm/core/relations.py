"""Association resolution for struct and sequence-of-struct fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, cast

from .errors import RelationshipError
from .fields import TypeInfo, TypeKind
from .models import FieldMetadata, RelationshipKind, RelationshipMetadata, find_field
from .naming import to_db_name

LOG = logging.getLogger(__name__)

FOREIGN_KEY_SUFFIX = "Id"
POLYMORPHIC_TYPE_SUFFIX = "Type"


class FieldSource(Protocol):
    """Resolution state the resolver reads associated models from."""

    strict: bool

    def fields_of(self, model_type: type) -> Sequence[FieldMetadata]: ...

    def mark_foreign_key(self, model_type: type, field: FieldMetadata) -> None: ...


@dataclass(frozen=True)
class PendingJoinTable:
    """Many-to-many field whose join table is built once primary keys are final."""

    field: FieldMetadata
    table_name: str
    destination: type


class RelationshipResolver:
    """Resolves the associations of one owner model.

    Foreign-key lookups match a field's identifier or its column name, on
    the owner for belongs_to and on the associated model otherwise. Fields
    found this way are marked through `FieldSource.mark_foreign_key`.
    """

    def __init__(
        self,
        source: FieldSource,
        owner: type,
        owner_fields: Sequence[FieldMetadata],
        owner_table: str,
    ):
        self._source = source
        self._owner = owner
        self._owner_fields = owner_fields
        self._owner_table = owner_table
        self.pending_join_tables: List[PendingJoinTable] = []

    @staticmethod
    def is_embedded(field: FieldMetadata) -> bool:
        return field.anonymous or "EMBEDDED" in field.tag_settings

    def embedded_fields(self, field: FieldMetadata, target: type) -> List[FieldMetadata]:
        """Clone every field of `target` under the embedding field's name."""

        clones = []
        for target_field in self._source.fields_of(target):
            clone = target_field.clone()
            clone.name_chain = (field.name, *target_field.name_chain)
            clones.append(clone)
        return clones

    def resolve(self, field: FieldMetadata, info: TypeInfo) -> None:
        """Attach a relationship to `field`, or leave it without one."""

        target = cast(type, info.target)
        settings = field.tag_settings
        foreign_key = settings.get("FOREIGNKEY", "")
        target_fields = self._source.fields_of(target)
        draft = self._polymorphic_setup(settings, target, target_fields)

        if info.kind is TypeKind.SEQUENCE:
            foreign_key = foreign_key or self._owner.__name__ + FOREIGN_KEY_SUFFIX
            if "MANY2MANY" in settings:
                field.relationship = self._many_to_many(
                    field, target, foreign_key, draft
                )
                return
            relationship = self._has(
                RelationshipKind.HAS_MANY, target, target_fields, foreign_key, draft
            )
        else:
            relationship = self._belongs_to(foreign_key or field.name + FOREIGN_KEY_SUFFIX, draft)
            if relationship is None:
                foreign_key = foreign_key or self._owner.__name__ + FOREIGN_KEY_SUFFIX
                relationship = self._has(
                    RelationshipKind.HAS_ONE, target, target_fields, foreign_key, draft
                )

        if relationship is None:
            self._omit(field, foreign_key)
        field.relationship = relationship

    def _polymorphic_setup(
        self,
        settings: Dict[str, str],
        target: type,
        target_fields: Sequence[FieldMetadata],
    ) -> Dict[str, str]:
        polymorphic = settings.get("POLYMORPHIC")
        if not polymorphic:
            return {}

        id_field = find_field(polymorphic + FOREIGN_KEY_SUFFIX, target_fields)
        type_field = find_field(polymorphic + POLYMORPHIC_TYPE_SUFFIX, target_fields)
        if id_field is None or type_field is None:
            return {}

        self._source.mark_foreign_key(target, id_field)
        self._source.mark_foreign_key(target, type_field)
        return {
            "foreign_field_name": id_field.name,
            "foreign_column_name": id_field.column_name,
            "polymorphic_type_field_name": type_field.name,
            "polymorphic_type_column_name": type_field.column_name,
            "polymorphic_value": self._owner_table,
        }

    def _many_to_many(
        self,
        field: FieldMetadata,
        target: type,
        foreign_key: str,
        draft: Dict[str, str],
    ) -> RelationshipMetadata:
        settings = field.tag_settings
        association_key = settings.get("ASSOCIATIONFOREIGNKEY") or target.__name__ + FOREIGN_KEY_SUFFIX
        self.pending_join_tables.append(
            PendingJoinTable(field=field, table_name=settings["MANY2MANY"], destination=target)
        )
        return RelationshipMetadata(
            kind=RelationshipKind.MANY_TO_MANY,
            **{
                **draft,
                "foreign_field_name": foreign_key,
                "foreign_column_name": to_db_name(foreign_key),
                "association_foreign_field_name": association_key,
                "association_foreign_column_name": to_db_name(association_key),
            },
        )

    def _belongs_to(self, foreign_key: str, draft: Dict[str, str]) -> Optional[RelationshipMetadata]:
        found = find_field(foreign_key, self._owner_fields)
        if found is None:
            return None
        self._source.mark_foreign_key(self._owner, found)
        return RelationshipMetadata(
            kind=RelationshipKind.BELONGS_TO,
            **{
                **draft,
                "foreign_field_name": found.name,
                "foreign_column_name": found.column_name,
            },
        )

    def _has(
        self,
        kind: RelationshipKind,
        target: type,
        target_fields: Sequence[FieldMetadata],
        foreign_key: str,
        draft: Dict[str, str],
    ) -> Optional[RelationshipMetadata]:
        found = find_field(foreign_key, target_fields)
        if found is not None:
            self._source.mark_foreign_key(target, found)
            return RelationshipMetadata(
                kind=kind,
                **{
                    **draft,
                    "foreign_field_name": found.name,
                    "foreign_column_name": found.column_name,
                },
            )
        if draft.get("foreign_field_name"):
            return RelationshipMetadata(kind=kind, **draft)
        return None

    def _omit(self, field: FieldMetadata, foreign_key: str) -> None:
        if self._source.strict:
            raise RelationshipError(self._owner.__name__, field.name, foreign_key)
        LOG.debug(
            "No foreign key %r for %s.%s; field is left without a relationship",
            foreign_key,
            self._owner.__name__,
            field.name,
        )
