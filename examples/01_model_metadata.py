"""Inspect tags, columns, primary keys and column types of one model."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "tagorm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tagorm import ModelRegistry, MySQLDialect, PostgresDialect, SQLiteDialect, column_definition


@dataclass
class Audit:
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Account:
    id: int = 0
    email: str = field(default="", metadata={"sql": "type:varchar(120);not null;unique"})
    display_name: str = field(default="", metadata={"orm": "column:name;size:64"})
    audit: Audit = field(default_factory=Audit, metadata={"orm": "embedded"})
    session_token: str = field(default="", metadata={"sql": "-"})


def main() -> None:
    registry = ModelRegistry(table_name_handler=lambda name: f"app_{name}")
    metadata = registry.model_metadata(Account)

    print("table:", registry.table_name(Account), f"(raw {metadata.table_name!r})")
    print("primary keys:", [f.column_name for f in metadata.primary_key_fields])
    for meta in metadata.fields:
        state = "ignored" if meta.is_ignored else "column"
        print(f"  {'.'.join(meta.name_chain):<22} {state:<8} {meta.column_name}")

    for dialect in (SQLiteDialect(), PostgresDialect(), MySQLDialect()):
        print(f"\n===== {dialect.name} =====")
        for meta in metadata.fields:
            if meta.is_normal and not meta.is_ignored:
                print(" ", column_definition(meta, dialect))


if __name__ == "__main__":
    main()
