from __future__ import annotations

import threading
import unittest
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tagorm.core.cache import FieldPatch, ModelMetadataCache
from tagorm.core.metadata import ModelRegistry, model_type_of
from tagorm.core.models import FieldMetadata, ModelMetadata


@dataclass
class Customer:
    id: int = 0
    name: str = ""
    orders: list[Order] = field(default_factory=list)


@dataclass
class Order:
    id: int = 0
    customer_id: int = 0


@dataclass
class LegacyInvoice:
    __table__ = "invoice_legacy"
    id: int = 0


@dataclass
class Shipment:
    id: int = 0

    def table_name(self) -> str:
        return "shipping_records"


@dataclass
class Tenant:
    id: int = 0
    region: str = "eu"

    def table_name(self) -> str:
        return f"tenants_{self.region}"


@dataclass
class Archive:
    id: int

    @classmethod
    def table_name(cls) -> str:
        return "archive_rows"


@dataclass
class Reservation:
    id: int

    def table_name(self) -> str:
        return "never_used"


@dataclass
class Note:
    id: int = 0
    body: str = ""
    deleted_at: Optional[datetime] = None


class ModelRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = ModelRegistry()

    def test_resolution_is_cached_per_type(self) -> None:
        first = self.registry.model_metadata(Customer)
        self.assertIs(self.registry.model_metadata(Customer(id=1)), first)
        self.assertIs(self.registry.model_metadata([Customer(), Customer()]), first)
        self.assertIs(self.registry.model_metadata(list[Customer]), first)
        self.assertEqual(len(self.registry.cache), 2)

    def test_registries_do_not_share_entries(self) -> None:
        other = ModelRegistry()
        self.assertIsNot(
            self.registry.model_metadata(Customer),
            other.model_metadata(Customer),
        )

    def test_shared_cache_between_registries(self) -> None:
        cache = ModelMetadataCache()
        first = ModelRegistry(cache=cache).model_metadata(Order)
        self.assertIs(ModelRegistry(cache=cache).model_metadata(Order), first)

    def test_invalid_input_yields_empty_uncached_metadata(self) -> None:
        for value in (None, [], 42, "text", int):
            with self.subTest(value=value):
                metadata = self.registry.model_metadata(value)
                self.assertTrue(metadata.is_empty)
                self.assertEqual(metadata.primary_key_fields, ())
        self.assertIsNone(self.registry.model_metadata([]).model_type)
        self.assertIs(self.registry.model_metadata(42).model_type, int)
        self.assertEqual(len(self.registry.cache), 0)

    def test_model_type_of(self) -> None:
        self.assertIs(model_type_of(Customer), Customer)
        self.assertIs(model_type_of(Customer()), Customer)
        self.assertIs(model_type_of((Order(),)), Order)
        self.assertIs(model_type_of(list[Optional[Order]]), Order)
        self.assertIsNone(model_type_of(None))

    def test_pluralized_and_singular_table_names(self) -> None:
        self.assertEqual(self.registry.table_name(Customer), "customers")
        singular = ModelRegistry(singular_table=True)
        self.assertEqual(singular.table_name(Customer), "customer")

    def test_table_name_handler_applies_on_lookup_only(self) -> None:
        registry = ModelRegistry(table_name_handler=lambda name: f"shop_{name}")
        self.assertEqual(registry.table_name(Order), "shop_orders")
        self.assertEqual(registry.model_metadata(Order).table_name, "orders")

    def test_table_name_handler_must_be_callable(self) -> None:
        with self.assertRaises(TypeError):
            ModelRegistry(table_name_handler="prefix_")  # type: ignore[arg-type]

    def test_table_name_overrides(self) -> None:
        self.assertEqual(self.registry.table_name(LegacyInvoice), "invoice_legacy")
        self.assertEqual(self.registry.table_name(Shipment), "shipping_records")
        self.assertEqual(self.registry.table_name(Archive), "archive_rows")
        self.assertEqual(self.registry.table_name(Reservation), "reservations")

    def test_instance_table_name_wins_over_zero_value(self) -> None:
        self.assertEqual(self.registry.table_name(Tenant(region="us")), "tenants_us")
        self.assertEqual(ModelRegistry().table_name(Tenant), "tenants_eu")

    def test_soft_delete_and_has_column(self) -> None:
        note = self.registry.model_metadata(Note)
        self.assertTrue(note.soft_delete)
        self.assertTrue(note.has_column("DeletedAt"))
        self.assertFalse(self.registry.model_metadata(Order).soft_delete)
        self.assertFalse(self.registry.model_metadata(Customer).has_column("orders"))

    def test_concurrent_first_resolution_publishes_one_entry(self) -> None:
        registry = ModelRegistry()
        workers = 8
        barrier = threading.Barrier(workers)
        results: list[ModelMetadata] = []
        lock = threading.Lock()

        def _resolve() -> None:
            barrier.wait()
            metadata = registry.model_metadata(Customer)
            with lock:
                results.append(metadata)

        threads = [threading.Thread(target=_resolve) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), workers)
        self.assertEqual(len({id(metadata) for metadata in results}), 1)
        self.assertIs(results[0], registry.model_metadata(Customer))
        self.assertTrue(registry.model_metadata(Order).field("customer_id").is_foreign_key)


class ModelMetadataCacheTests(unittest.TestCase):
    def _metadata(self, model_type: type) -> ModelMetadata:
        return ModelMetadata(
            model_type=model_type,
            table_name="orders",
            fields=(FieldMetadata(name="customer_id", name_chain=("customer_id",)),),
        )

    def test_publish_keeps_first_entry_and_patches_it(self) -> None:
        cache = ModelMetadataCache()
        first = self._metadata(Order)
        second = self._metadata(Order)
        cache.set(Order, first)

        published = cache.publish({Order: second}, [FieldPatch(Order, ("customer_id",))])

        self.assertIs(published[Order], first)
        self.assertIs(cache.get(Order), first)
        self.assertTrue(first.fields[0].is_foreign_key)
        self.assertFalse(second.fields[0].is_foreign_key)

    def test_publish_ignores_patches_for_unknown_fields(self) -> None:
        cache = ModelMetadataCache()
        metadata = self._metadata(Order)
        cache.publish({Order: metadata}, [FieldPatch(Order, ("missing",)), FieldPatch(Note, ("id",))])
        self.assertIn(Order, cache)
        self.assertNotIn(Note, cache)
        self.assertFalse(metadata.fields[0].is_foreign_key)


if __name__ == "__main__":
    unittest.main()
