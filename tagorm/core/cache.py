"""Thread-safe, type-keyed store of resolved model metadata."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .models import ModelMetadata

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldPatch:
    """Deferred `is_foreign_key` mark on one field of one model."""

    model_type: type
    name_chain: Tuple[str, ...]

    def apply(self, metadata: ModelMetadata) -> bool:
        target = metadata.field_by_chain(self.name_chain)
        if target is None:
            return False
        target.is_foreign_key = True
        return True


class ModelMetadataCache:
    """Mapping from model type to published `ModelMetadata`.

    Reads take no lock. Writes are serialized so a publish (entries plus
    their field patches) is never observed half-applied. Entries are never
    evicted.
    """

    def __init__(self) -> None:
        self._entries: Dict[type, ModelMetadata] = {}
        self._lock = threading.Lock()

    def get(self, model_type: type) -> Optional[ModelMetadata]:
        return self._entries.get(model_type)

    def set(self, model_type: type, metadata: ModelMetadata) -> None:
        with self._lock:
            self._entries[model_type] = metadata

    def publish(
        self,
        entries: Mapping[type, ModelMetadata],
        patches: Iterable[FieldPatch] = (),
    ) -> Dict[type, ModelMetadata]:
        """Publish one resolution's models and apply its field patches.

        An entry published earlier by a concurrent resolution wins over the
        new one; patches are applied to whichever entry ends up cached.
        Returns the cached entry for every key of `entries`.
        """

        with self._lock:
            final = {
                model_type: self._entries.get(model_type, metadata)
                for model_type, metadata in entries.items()
            }
            for patch in patches:
                target = final.get(patch.model_type) or self._entries.get(patch.model_type)
                if target is None or not patch.apply(target):
                    LOG.debug(
                        "Skipping foreign key patch %s on %s",
                        ".".join(patch.name_chain),
                        patch.model_type.__name__,
                    )
            for model_type, metadata in final.items():
                self._entries.setdefault(model_type, metadata)

        LOG.debug("Published metadata for %s", ", ".join(t.__name__ for t in final))
        return final

    def __contains__(self, model_type: object) -> bool:
        return model_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)
