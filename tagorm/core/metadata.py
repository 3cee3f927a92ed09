"""Model metadata resolution: registry, resolution sessions and model builders."""

from __future__ import annotations

import inspect
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cache import FieldPatch, ModelMetadataCache
from .contracts import TableNameHandler, Tabler
from .fields import (
    TypeKind,
    build_field_skeletons,
    classify_field,
    is_model_type,
    resolve_field_types,
    sequence_element,
    unwrap_optional,
)
from .join_table import setup_join_table
from .models import FieldMetadata, ModelMetadata
from .naming import default_table_name
from .relations import RelationshipResolver

LOG = logging.getLogger(__name__)

PRIMARY_KEY_FALLBACK_COLUMN = "id"


class ModelRegistry:
    """Resolves and caches model metadata.

    Args:
        singular_table: Use `to_db_name(TypeName)` without pluralizing.
        table_name_handler: Post-processes table names returned by
            `table_name()`. Cached metadata keeps the raw name.
        strict: Raise `RelationshipError` for associations whose foreign key
            cannot be located instead of leaving the field without one.
        cache: Shared cache; a private one is created when omitted.
    """

    def __init__(
        self,
        *,
        singular_table: bool = False,
        table_name_handler: Optional[TableNameHandler] = None,
        strict: bool = False,
        cache: Optional[ModelMetadataCache] = None,
    ):
        if table_name_handler is not None and not callable(table_name_handler):
            raise TypeError("table_name_handler must be callable.")
        self._singular_table = singular_table
        self._table_name_handler = table_name_handler
        self._strict = strict
        self._cache = cache if cache is not None else ModelMetadataCache()

    @property
    def singular_table(self) -> bool:
        return self._singular_table

    @property
    def table_name_handler(self) -> Optional[TableNameHandler]:
        return self._table_name_handler

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def cache(self) -> ModelMetadataCache:
        return self._cache

    def model_metadata(self, value: Any) -> ModelMetadata:
        """Return metadata for an instance, a model class or a list of instances.

        Anything that is not a dataclass yields an empty, uncached
        `ModelMetadata`.
        """

        model_type = model_type_of(value)
        if model_type is None:
            return ModelMetadata(model_type=None)

        cached = self._cache.get(model_type)
        if cached is not None:
            return cached

        if not is_model_type(model_type):
            return ModelMetadata(model_type=model_type)

        LOG.debug("Resolving metadata for %s", model_type.__name__)
        return ResolutionSession(self).resolve(model_type, value)

    def fields(self, value: Any) -> Tuple[FieldMetadata, ...]:
        return self.model_metadata(value).fields

    def table_name(self, value: Any) -> str:
        """Resolved table name with `table_name_handler` applied."""

        name = self.model_metadata(value).table_name
        if self._table_name_handler is not None:
            return self._table_name_handler(name)
        return name


class ResolutionSession:
    """State of one cache-miss resolution.

    Models reached through associations are built in the same session and
    published together with every foreign-key patch once the root model is
    complete. Models still being built are visible to their own associations
    through their phase 1 fields, which resolves self and mutual references.
    """

    def __init__(self, registry: ModelRegistry):
        self.strict = registry.strict
        self._registry = registry
        self._building: Dict[type, _ModelBuilder] = {}
        self._completed: Dict[type, ModelMetadata] = {}
        self._patches: List[FieldPatch] = []

    def resolve(self, model_type: type, value: Any) -> ModelMetadata:
        self._build(model_type, value)
        published = self._registry.cache.publish(self._completed, self._patches)
        return published[model_type]

    def fields_of(self, model_type: type) -> Sequence[FieldMetadata]:
        cached = self._registry.cache.get(model_type)
        if cached is not None:
            return cached.fields
        if model_type in self._completed:
            return self._completed[model_type].fields
        if model_type in self._building:
            return self._building[model_type].skeletons
        return self._build(model_type, model_type).fields

    def primary_keys_of(self, model_type: type) -> Sequence[FieldMetadata]:
        cached = self._registry.cache.get(model_type)
        if cached is not None:
            return cached.primary_key_fields
        if model_type in self._completed:
            return self._completed[model_type].primary_key_fields
        if model_type in self._building:
            return self._building[model_type].primary
        return self._build(model_type, model_type).primary_key_fields

    def mark_foreign_key(self, model_type: type, field: FieldMetadata) -> None:
        self._patches.append(FieldPatch(model_type, field.name_chain))
        # Published entries are only patched inside `publish`.
        if model_type in self._building or model_type in self._completed:
            field.is_foreign_key = True

    def _build(self, model_type: type, value: Any) -> ModelMetadata:
        table_name = resolve_table_name(
            value, model_type, singular=self._registry.singular_table
        )
        builder = _ModelBuilder(self, model_type, table_name)
        self._building[model_type] = builder
        try:
            metadata = builder.build()
        finally:
            del self._building[model_type]
        self._completed[model_type] = metadata
        return metadata


class _ModelBuilder:
    def __init__(self, session: ResolutionSession, model_type: type, table_name: str):
        self._session = session
        self._model_type = model_type
        self._table_name = table_name
        self.skeletons, self.primary = build_field_skeletons(
            model_type, resolve_field_types(model_type)
        )

    def build(self) -> ModelMetadata:
        resolver = RelationshipResolver(
            self._session, self._model_type, self.skeletons, self._table_name
        )
        resolved: List[FieldMetadata] = []

        for field in self.skeletons:
            if field.is_ignored:
                resolved.append(field)
                continue

            info = classify_field(field)
            if info.kind is TypeKind.STRUCT and resolver.is_embedded(field):
                for clone in resolver.embedded_fields(field, info.target):
                    resolved.append(clone)
                    if clone.is_primary_key:
                        self.primary.append(clone)
                continue
            if info.kind in (TypeKind.STRUCT, TypeKind.SEQUENCE):
                resolver.resolve(field, info)

            if (
                field.is_normal
                and not self.primary
                and field.column_name == PRIMARY_KEY_FALLBACK_COLUMN
            ):
                field.is_primary_key = True
                self.primary.append(field)
            resolved.append(field)

        for pending in resolver.pending_join_tables:
            relationship = pending.field.relationship
            if relationship is None:
                continue
            pending.field.relationship = replace(
                relationship,
                join_table=setup_join_table(
                    relationship,
                    pending.table_name,
                    self._model_type,
                    self.primary,
                    pending.destination,
                    self._session.primary_keys_of(pending.destination),
                ),
            )

        return ModelMetadata(
            model_type=self._model_type,
            table_name=self._table_name,
            fields=tuple(resolved),
            primary_key_fields=tuple(self.primary),
        )


def model_type_of(value: Any) -> Optional[type]:
    """Normalize an instance, class, list of instances or `list[Model]` to a type."""

    if value is None:
        return None

    element = sequence_element(value)
    if element is not None:
        element = unwrap_optional(element)
        return element if isinstance(element, type) else None

    if isinstance(value, type):
        return value

    if isinstance(value, (list, tuple)):
        return type(value[0]) if value else None

    return type(value)


def resolve_table_name(value: Any, model_type: type, *, singular: bool = False) -> str:
    """Pick the table name of `model_type`.

    Order: `table_name()` on the passed instance, a `__table__` string or a
    class/static `table_name()` on the type, `table_name()` on a zero value
    built with `model_type()`, then the derived name.
    """

    if not isinstance(value, type) and isinstance(value, Tabler) and callable(value.table_name):
        return value.table_name()

    declared = getattr(model_type, "__table__", None)
    if isinstance(declared, str) and declared:
        return declared

    method = inspect.getattr_static(model_type, "table_name", None)
    if isinstance(method, (classmethod, staticmethod)):
        return model_type.table_name()  # type: ignore[attr-defined]
    if callable(method):
        zero = _zero_value(model_type)
        if zero is not None:
            return zero.table_name()

    return default_table_name(model_type.__name__, singular=singular)


def _zero_value(model_type: type) -> Any:
    try:
        return model_type()
    except (TypeError, ValueError) as exc:
        LOG.debug("Cannot build a zero value of %s for table_name(): %s", model_type.__name__, exc)
        return None
