from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence, Union

from tagorm.core.fields import TypeKind, classify_type, sequence_element, unwrap_optional
from tagorm.core.metadata import ModelRegistry


@dataclass
class NullString:
    string: str = ""
    valid: bool = False

    def scan(self, value: Any) -> None:
        self.string = "" if value is None else str(value)
        self.valid = value is not None


@dataclass
class Account:
    id: int = 0
    name: str = field(default="", metadata={"orm": "column:account_name;default:'anon'"})
    balance: Decimal = Decimal(0)
    created_at: Optional[datetime] = None
    secret: str = field(default="", metadata={"sql": "-"})
    tags: list[str] = field(default_factory=list)
    nickname: Optional[NullString] = None
    _cache: dict = field(default_factory=dict)


@dataclass
class Ticket:
    id: int = 0
    code: str = field(default="", metadata={"orm": "primary_key;auto_increment"})


@dataclass
class Membership:
    group_id: int = field(default=0, metadata={"orm": "primary_key"})
    member_id: int = field(default=0, metadata={"orm": "primary_key"})


@dataclass
class KeylessLog:
    message: str = ""
    logged_on: date = field(default_factory=date.today)


@dataclass
class Dangling:
    id: int = 0
    ghost: Optional["Missing"] = None  # noqa: F821


class ClassifyTypeTests(unittest.TestCase):
    def test_scalars_and_timestamps_are_normal(self) -> None:
        for annotation in (int, Optional[int], str, Decimal, datetime, Optional[date], dict, Any):
            with self.subTest(annotation=annotation):
                self.assertIs(classify_type(annotation).kind, TypeKind.NORMAL)

    def test_scanner_wins_over_struct(self) -> None:
        self.assertIs(classify_type(NullString).kind, TypeKind.SCANNER)
        self.assertIs(classify_type(Optional[NullString]).kind, TypeKind.SCANNER)

    def test_struct_and_sequence_candidates(self) -> None:
        struct = classify_type(Optional[Account])
        self.assertIs(struct.kind, TypeKind.STRUCT)
        self.assertIs(struct.target, Account)

        for annotation in (list[Account], list[Optional[Account]], tuple[Account, ...], Sequence[Account]):
            with self.subTest(annotation=annotation):
                info = classify_type(annotation)
                self.assertIs(info.kind, TypeKind.SEQUENCE)
                self.assertIs(info.target, Account)

    def test_sequences_of_non_structs_are_normal(self) -> None:
        for annotation in (list[str], tuple[Account, int], list, list[NullString]):
            with self.subTest(annotation=annotation):
                self.assertIs(classify_type(annotation).kind, TypeKind.NORMAL)

    def test_unwrap_optional_only_unwraps_single_optional(self) -> None:
        self.assertIs(unwrap_optional(Optional[int]), int)
        self.assertIs(unwrap_optional(int | None), int)
        self.assertEqual(unwrap_optional(Union[int, str, None]), Union[int, str, None])
        self.assertIsNone(sequence_element(int))


class FieldClassifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = ModelRegistry()

    def test_exported_fields_in_declaration_order(self) -> None:
        metadata = self.registry.model_metadata(Account)
        self.assertEqual(
            [f.name for f in metadata.fields],
            ["id", "name", "balance", "created_at", "secret", "tags", "nickname"],
        )
        self.assertTrue(all(f.name_chain == (f.name,) for f in metadata.fields))

    def test_column_override_and_default_flag(self) -> None:
        name = self.registry.model_metadata(Account).field("name")
        self.assertEqual(name.column_name, "account_name")
        self.assertTrue(name.has_default_value)
        self.assertTrue(name.is_normal)

    def test_ignored_field_has_no_column(self) -> None:
        secret = self.registry.model_metadata(Account).field("secret")
        self.assertTrue(secret.is_ignored)
        self.assertFalse(secret.is_normal)
        self.assertEqual(secret.column_name, "")
        self.assertIsNone(secret.relationship)

    def test_scanner_and_timestamp_fields(self) -> None:
        metadata = self.registry.model_metadata(Account)
        nickname = metadata.field("nickname")
        self.assertTrue(nickname.is_scanner)
        self.assertTrue(nickname.is_normal)
        self.assertIsNone(nickname.relationship)

        created_at = metadata.field("created_at")
        self.assertTrue(created_at.is_normal)
        self.assertFalse(created_at.is_scanner)

    def test_column_names_exclude_ignored_fields(self) -> None:
        self.assertEqual(
            self.registry.model_metadata(Account).column_names,
            ["id", "account_name", "balance", "created_at", "tags", "nickname"],
        )

    def test_id_column_becomes_primary_key_when_none_declared(self) -> None:
        metadata = self.registry.model_metadata(Account)
        self.assertEqual([f.name for f in metadata.primary_key_fields], ["id"])
        self.assertTrue(metadata.field("id").is_primary_key)

    def test_declared_primary_key_disables_id_fallback(self) -> None:
        metadata = self.registry.model_metadata(Ticket)
        self.assertEqual([f.name for f in metadata.primary_key_fields], ["code"])
        self.assertFalse(metadata.field("id").is_primary_key)
        self.assertTrue(metadata.field("code").is_auto_increment)

    def test_composite_and_missing_primary_keys(self) -> None:
        composite = self.registry.model_metadata(Membership)
        self.assertEqual(
            [f.name for f in composite.primary_key_fields],
            ["group_id", "member_id"],
        )
        self.assertEqual(self.registry.model_metadata(KeylessLog).primary_key_fields, ())

    def test_unresolvable_annotation_degrades_to_normal_column(self) -> None:
        ghost = self.registry.model_metadata(Dangling).field("ghost")
        self.assertTrue(ghost.is_normal)
        self.assertIsNone(ghost.relationship)
        self.assertIs(self.registry.model_metadata(Dangling).field("id").type, int)


if __name__ == "__main__":
    unittest.main()
