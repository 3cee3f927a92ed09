"""Resolve belongs_to, has_one, has_many, many_to_many and polymorphic associations."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "tagorm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tagorm import ModelRegistry, RelationshipError


@dataclass
class Author:
    id: int = 0
    name: str = ""
    profile: Optional[Profile] = None
    posts: list[Post] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list, metadata={"orm": "polymorphic:Owner"})


@dataclass
class Profile:
    id: int = 0
    author_id: int = 0
    bio: str = ""


@dataclass
class Post:
    id: int = 0
    author_id: int = 0
    author: Optional[Author] = None
    tags: list[Tag] = field(default_factory=list, metadata={"orm": "many2many:post_tags"})
    comments: list[Comment] = field(default_factory=list, metadata={"orm": "polymorphic:Owner"})


@dataclass
class Tag:
    id: int = 0
    label: str = ""


@dataclass
class Comment:
    id: int = 0
    owner_id: int = 0
    owner_type: str = ""
    body: str = ""


@dataclass
class Draft:
    id: int = 0
    reviewer: Optional[Tag] = None


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")
    registry = ModelRegistry()

    for model in (Author, Post):
        metadata = registry.model_metadata(model)
        print(f"\n===== {metadata.table_name} =====")
        for name, relationship in metadata.relationships.items():
            print(
                f"  {name:<10} {relationship.kind.value:<13} "
                f"fk={relationship.foreign_column_name or '-'} "
                f"type={relationship.polymorphic_type_column_name or '-'}"
            )
            if relationship.join_table is not None:
                join_table = relationship.join_table
                print(f"  {'':<10} join table {join_table.table()} {join_table.column_names}")
                print(f"  {'':<10} row {join_table.junction_row(Post(id=1), Tag(id=9))}")

    comment = registry.model_metadata(Comment)
    print("\nforeign keys on comments:", [f.column_name for f in comment.fields if f.is_foreign_key])

    # `reviewer` has no key on either side: dropped by default, an error in strict mode.
    print("\ndraft relationships:", registry.model_metadata(Draft).relationships)
    try:
        ModelRegistry(strict=True).model_metadata(Draft)
    except RelationshipError as exc:
        print("strict mode:", exc)


if __name__ == "__main__":
    main()
