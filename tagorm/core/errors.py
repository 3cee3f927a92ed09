"""Exceptions raised by model metadata resolution."""

from __future__ import annotations


class MetadataError(Exception):
    """Base class for model metadata failures."""


class RelationshipError(MetadataError, ValueError):
    """Raised in strict mode when an association's foreign key cannot be located."""

    def __init__(self, model_name: str, field_name: str, foreign_key: str):
        self.model_name = model_name
        self.field_name = field_name
        self.foreign_key = foreign_key
        super().__init__(
            f"{model_name}.{field_name}: cannot locate foreign key {foreign_key!r} "
            "on either side of the association. Declare it or set "
            "metadata={'orm': 'foreignkey:...'}."
        )
