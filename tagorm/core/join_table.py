"""Join table descriptors for many-to-many associations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .contracts import TableNameHandler
from .models import FieldMetadata, RelationshipMetadata

DEFAULT_KEY_COLUMN = "id"


@dataclass(frozen=True)
class JoinTableForeignKey:
    """One join table column and the model key it references."""

    column_name: str
    association_column_name: str
    association_name_chain: Tuple[str, ...]

    def key_value(self, record: Any) -> Any:
        value = record
        for name in self.association_name_chain:
            value = getattr(value, name)
        return value


@dataclass(frozen=True)
class JoinTableSource:
    model_type: type
    foreign_keys: Tuple[JoinTableForeignKey, ...]


@dataclass(frozen=True)
class JoinTableHandler:
    """Synthetic table holding the two keys that link many-to-many models.

    The descriptor produces no SQL; query builders read its columns to write
    junction rows and build the three-way join.
    """

    table_name: str
    source: JoinTableSource
    destination: JoinTableSource

    def table(self, handler: Optional[TableNameHandler] = None) -> str:
        return handler(self.table_name) if handler is not None else self.table_name

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(
            key.column_name
            for side in (self.source, self.destination)
            for key in side.foreign_keys
        )

    def search_map(self, *records: Any) -> Dict[str, Any]:
        """Map join columns to key values of the given records.

        Records are matched to a side by type; the source side is checked
        first, so self-referential handlers fill the source columns.
        """

        values: Dict[str, Any] = {}
        for record in records:
            for side in (self.source, self.destination):
                if isinstance(record, side.model_type):
                    for key in side.foreign_keys:
                        values[key.column_name] = key.key_value(record)
                    break
        return values

    def junction_row(self, source: Any, destination: Any) -> Dict[str, Any]:
        """Build the column values of the row linking `source` to `destination`."""

        row = {key.column_name: key.key_value(source) for key in self.source.foreign_keys}
        row.update(
            {key.column_name: key.key_value(destination) for key in self.destination.foreign_keys}
        )
        return row


def setup_join_table(
    relationship: RelationshipMetadata,
    table_name: str,
    source: type,
    source_primary_keys: Sequence[FieldMetadata],
    destination: type,
    destination_primary_keys: Sequence[FieldMetadata],
) -> JoinTableHandler:
    """Build the join table of one many-to-many relationship.

    The source column is the relationship's foreign column and the
    destination column its association foreign column; each references the
    first primary key of its side, or `id` when the side declares none.
    """

    return JoinTableHandler(
        table_name=table_name,
        source=JoinTableSource(
            model_type=source,
            foreign_keys=(
                _foreign_key(relationship.foreign_column_name, source_primary_keys),
            ),
        ),
        destination=JoinTableSource(
            model_type=destination,
            foreign_keys=(
                _foreign_key(
                    relationship.association_foreign_column_name,
                    destination_primary_keys,
                ),
            ),
        ),
    )


def _foreign_key(column_name: str, primary_keys: Sequence[FieldMetadata]) -> JoinTableForeignKey:
    if primary_keys:
        primary = primary_keys[0]
        return JoinTableForeignKey(
            column_name=column_name,
            association_column_name=primary.column_name,
            association_name_chain=primary.name_chain,
        )
    return JoinTableForeignKey(
        column_name=column_name,
        association_column_name=DEFAULT_KEY_COLUMN,
        association_name_chain=(DEFAULT_KEY_COLUMN,),
    )
