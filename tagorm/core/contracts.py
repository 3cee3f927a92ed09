"""Capability contracts recognized during model introspection."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Callable, Protocol, get_origin, runtime_checkable

TableNameHandler = Callable[[str], str]

TIMESTAMP_TYPES = (datetime, date, time)


@runtime_checkable
class Tabler(Protocol):
    """Model that knows its own table name."""

    def table_name(self) -> str: ...


@runtime_checkable
class Scanner(Protocol):
    """Field type that decodes itself from a raw column value.

    Scanner types are stored as plain columns even when they are dataclasses.
    """

    def scan(self, value: Any) -> None: ...


def is_scanner_type(tp: Any) -> bool:
    return _is_class(tp) and issubclass(tp, Scanner)


def is_timestamp_type(tp: Any) -> bool:
    return _is_class(tp) and issubclass(tp, TIMESTAMP_TYPES)


def _is_class(tp: Any) -> bool:
    # `list[int]` passes `isinstance(..., type)` on Python 3.10.
    return isinstance(tp, type) and get_origin(tp) is None
