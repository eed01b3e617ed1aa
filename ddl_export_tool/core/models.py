"""Dialect-neutral metadata model for tables, columns and indexes."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


NUMERIC_TYPE_NAMES = ("num", "numeric")


class TableKind(Enum):
    TABLE = "table"
    VIEW = "view"

    @classmethod
    def from_catalog(cls, member_type: str) -> "TableKind":
        """Map a catalog member type (DATA, TABLE, VIEW) onto a table kind."""
        value = (member_type or "").strip().upper()
        if value in ("DATA", "TABLE"):
            return cls.TABLE
        if value == "VIEW":
            return cls.VIEW
        raise ValueError(f"Unknown member type: {member_type!r}")


@dataclass(frozen=True)
class TableMeta:
    library: str
    name: str
    kind: TableKind = TableKind.TABLE

    @property
    def qualified_name(self) -> str:
        return f"{self.library}.{self.name}"


@dataclass(frozen=True)
class ColumnMeta:
    """One column as declared in the catalog.

    ``type_name`` is kept verbatim (``num``/``char`` for most catalogs) so that
    dialects which mirror the catalog can pass it straight through.
    """

    name: str
    type_name: str
    length: int
    format: Optional[str] = None
    label: Optional[str] = None
    nullable: bool = True
    position: int = 0

    @property
    def is_numeric(self) -> bool:
        return (self.type_name or "").strip().lower() in NUMERIC_TYPE_NAMES

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ColumnMeta":
        notnull = record.get("notnull")
        if isinstance(notnull, str):
            not_nullable = notnull.strip().lower() in ("yes", "y", "true", "1")
        else:
            not_nullable = bool(notnull)
        return cls(
            name=record["name"],
            type_name=record.get("type") or "char",
            length=int(record.get("length") or 0),
            format=(record.get("format") or None),
            label=(record.get("label") or None),
            nullable=not not_nullable,
            position=int(record.get("position") or 0),
        )


@dataclass(frozen=True)
class IndexEntry:
    index_name: str
    column_name: str
    position: int
    usage: str = ""
    unique: bool = False
    no_missing: bool = False

    @property
    def sort_key(self) -> Tuple[str, str, int]:
        return (self.usage or "", self.index_name.upper(), self.position)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "IndexEntry":
        return cls(
            index_name=record["index_name"],
            column_name=record["column_name"],
            position=int(record.get("position") or 0),
            usage=record.get("usage") or "",
            unique=_flag(record.get("unique")),
            no_missing=_flag(record.get("no_missing")),
        )


@dataclass(frozen=True)
class IndexGroup:
    name: str
    unique: bool
    columns: Tuple[str, ...]
    primary_key_candidate: bool = False


@dataclass(frozen=True)
class TableMetadata:
    """Everything the renderer needs for one table."""

    table: TableMeta
    columns: Tuple[ColumnMeta, ...] = field(default_factory=tuple)
    index_entries: Tuple[IndexEntry, ...] = field(default_factory=tuple)


def _flag(value: Any) -> bool:
    # Catalogs report flags as 0/1, yes/no or booleans
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "y", "true", "1")
    return bool(value)
