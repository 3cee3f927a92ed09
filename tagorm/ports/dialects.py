"""Concrete SQL dialects used to derive column types."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, get_origin

MAX_VARCHAR_SIZE = 65532


class Dialect:
    """Base dialect that defines identifier quoting and column types."""

    name: str = "generic"
    quote_char: str = '"'

    def q(self, ident: str) -> str:
        """Quote SQL identifier."""

        return f"{self.quote_char}{ident}{self.quote_char}"

    def sql_type(self, python_type: Any, size: int = 255, auto_increment: bool = False) -> str:
        """Map a Python type to this dialect's column type.

        Raises:
            TypeError: If the type has no column mapping.
        """

        base = _storage_type(python_type)
        if base is bool:
            return self.bool_type()
        if base is int:
            return self.int_type(auto_increment)
        if base is float or base is Decimal:
            return self.float_type()
        if base is str:
            return self.str_type(size)
        if base is datetime:
            return self.datetime_type()
        if base is date:
            return "date"
        if base is time:
            return "time"
        if base in (bytes, bytearray, memoryview):
            return self.bytes_type(size)
        raise TypeError(f"Invalid sql type {getattr(python_type, '__name__', python_type)!r} for {self.name}.")

    def bool_type(self) -> str:
        return "boolean"

    def int_type(self, auto_increment: bool) -> str:
        return "integer"

    def float_type(self) -> str:
        return "real"

    def str_type(self, size: int) -> str:
        return f"varchar({size})"

    def datetime_type(self) -> str:
        return "timestamp"

    def bytes_type(self, size: int) -> str:
        return "blob"


class SQLiteDialect(Dialect):
    name = "sqlite"
    quote_char = '"'

    def bool_type(self) -> str:
        return "bool"

    def int_type(self, auto_increment: bool) -> str:
        if auto_increment:
            return "integer primary key autoincrement"
        return "integer"

    def datetime_type(self) -> str:
        return "datetime"


class PostgresDialect(Dialect):
    name = "postgres"
    quote_char = '"'

    def int_type(self, auto_increment: bool) -> str:
        return "serial" if auto_increment else "integer"

    def float_type(self) -> str:
        return "numeric"

    def str_type(self, size: int) -> str:
        if 0 < size < MAX_VARCHAR_SIZE:
            return f"varchar({size})"
        return "text"

    def datetime_type(self) -> str:
        return "timestamp with time zone"

    def bytes_type(self, size: int) -> str:
        return "bytea"


class MySQLDialect(Dialect):
    name = "mysql"
    quote_char = "`"

    def int_type(self, auto_increment: bool) -> str:
        return "int AUTO_INCREMENT" if auto_increment else "int"

    def float_type(self) -> str:
        return "double"

    def str_type(self, size: int) -> str:
        if 0 < size < MAX_VARCHAR_SIZE:
            return f"varchar({size})"
        return "longtext"

    def datetime_type(self) -> str:
        return "timestamp NULL"

    def bytes_type(self, size: int) -> str:
        if 0 < size < MAX_VARCHAR_SIZE:
            return f"varbinary({size})"
        return "longblob"


def _storage_type(python_type: Any) -> Any:
    if get_origin(python_type) is not None:
        return python_type
    if isinstance(python_type, type) and issubclass(python_type, Enum):
        for base in (bool, int, float, str):
            if issubclass(python_type, base):
                return base
        return str
    if isinstance(python_type, type):
        for base in (bool, datetime, date, time, int, float, Decimal, str, bytes, bytearray, memoryview):
            if issubclass(python_type, base):
                return base
    return python_type
