"""Field discovery and type classification for dataclass models."""

from __future__ import annotations

import collections.abc
import logging
import types
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .contracts import is_scanner_type, is_timestamp_type
from .models import FieldMetadata
from .naming import to_db_name
from .tags import field_tag_settings, is_ignored_tag

LOG = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
}


class TypeKind(str, Enum):
    """How a field's effective type participates in persistence."""

    NORMAL = "normal"
    SCANNER = "scanner"
    STRUCT = "struct"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class TypeInfo:
    kind: TypeKind
    target: Optional[type] = None


def is_model_type(tp: Any) -> bool:
    """Return True for dataclass types (not instances)."""

    return isinstance(tp, type) and is_dataclass(tp)


def resolve_field_types(cls: type) -> Dict[str, Any]:
    """Resolve field annotations, including string and self references.

    Falls back to per-field resolution when one annotation cannot be
    evaluated; unresolved annotations are kept as written.
    """

    localns = {cls.__name__: cls}
    try:
        return dict(get_type_hints(cls, localns=localns))
    except Exception as exc:
        LOG.debug("Resolving %s annotations field by field: %s", cls.__name__, exc)

    hints: Dict[str, Any] = {}
    for dc_field in fields(cls):
        hints[dc_field.name] = _resolve_annotation(cls, dc_field.name, dc_field.type, localns)
    return hints


def build_field_skeletons(
    cls: type,
    hints: Dict[str, Any],
) -> Tuple[List[FieldMetadata], List[FieldMetadata]]:
    """Build one `FieldMetadata` per exported field, in declaration order.

    Returns `(fields, primary_key_fields)`. Only tag-level facts are known at
    this point; types are classified once every sibling exists.
    """

    skeletons: List[FieldMetadata] = []
    primary: List[FieldMetadata] = []

    for dc_field in fields(cls):
        if dc_field.name.startswith("_"):
            continue

        meta = FieldMetadata(
            name=dc_field.name,
            name_chain=(dc_field.name,),
            type=hints.get(dc_field.name, dc_field.type),
            anonymous=bool(dc_field.metadata.get("anonymous")),
        )

        if is_ignored_tag(dc_field):
            meta.is_ignored = True
        else:
            settings = field_tag_settings(dc_field)
            meta.tag_settings = settings
            if "PRIMARY_KEY" in settings:
                meta.is_primary_key = True
                primary.append(meta)
            meta.has_default_value = "DEFAULT" in settings
            meta.is_auto_increment = "AUTO_INCREMENT" in settings
            if "COLUMN" in settings:
                meta.column_name = settings["COLUMN"]
            else:
                meta.column_name = to_db_name(dc_field.name)

        skeletons.append(meta)

    return skeletons, primary


def classify_type(annotation: Any) -> TypeInfo:
    """Classify an annotation after unwrapping one level of `Optional`."""

    base = unwrap_optional(annotation)
    if is_scanner_type(base):
        return TypeInfo(TypeKind.SCANNER)
    if is_timestamp_type(base):
        return TypeInfo(TypeKind.NORMAL)
    if is_model_type(base):
        return TypeInfo(TypeKind.STRUCT, base)

    element = sequence_element(base)
    if element is not None:
        element = unwrap_optional(element)
        if is_model_type(element) and not is_scanner_type(element):
            return TypeInfo(TypeKind.SEQUENCE, element)

    return TypeInfo(TypeKind.NORMAL)


def classify_field(field: FieldMetadata) -> TypeInfo:
    """Set scanner/normal flags and return the classification."""

    info = classify_type(field.type)
    if info.kind is TypeKind.SCANNER:
        field.is_scanner = True
        field.is_normal = True
    elif info.kind is TypeKind.NORMAL:
        field.is_normal = True
    return info


def unwrap_optional(annotation: Any) -> Any:
    """Extract `T` from `Optional[T]` / `T | None` annotations."""

    origin = get_origin(annotation)
    if origin not in {Union, types.UnionType}:
        return annotation

    all_args = get_args(annotation)
    args = [arg for arg in all_args if arg is not type(None)]
    if len(args) == 1 and len(all_args) == 2:
        return args[0]
    return annotation


def sequence_element(annotation: Any) -> Any:
    """Return the element type of a homogeneous collection annotation."""

    origin = get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None

    args = get_args(annotation)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return None
    if len(args) != 1:
        return None
    return args[0]


def _resolve_annotation(cls: type, name: str, annotation: Any, localns: Dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation

    holder = type(
        f"_{cls.__name__}Annotation",
        (),
        {"__annotations__": {name: annotation}, "__module__": cls.__module__},
    )
    try:
        return get_type_hints(holder, localns=localns)[name]
    except Exception as exc:
        LOG.debug("Keeping unresolved annotation %s.%s = %r: %s", cls.__name__, name, annotation, exc)
        return annotation
