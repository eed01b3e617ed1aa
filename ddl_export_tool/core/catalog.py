from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ddl_export_tool.core.database import DatabaseConnection


SQLSERVER_ENGINE = "SQLSVR"
SCHEMA_OPTION = "Schema/Owner"


class Catalog(ABC):
    """Read-only source of table, column and index records.

    Identifiers are matched case-insensitively. Records are plain dicts so the
    same shape can be stored in snapshot files.
    """

    @abstractmethod
    def tables(self, library: str, table_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return ``{library, name, kind}`` records, optionally for one table."""

    @abstractmethod
    def columns(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        """Return ``{name, type, length, format, label, notnull, position}`` records."""

    @abstractmethod
    def indexes(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        """Return ``{index_name, column_name, position, usage, unique, no_missing}`` records."""

    @abstractmethod
    def schema_overrides(self, library: str) -> List[str]:
        """Return SQL Server schema names registered for the library."""


class OdbcCatalog(Catalog):
    """Catalog backed by the dictionary views of an ODBC data source."""

    def __init__(self, connection: DatabaseConnection) -> None:
        self.connection = connection

    def tables(self, library: str, table_name: Optional[str] = None) -> List[Dict[str, Any]]:
        query = (
            "SELECT libname, memname, memtype"
            " FROM dictionary.tables"
            " WHERE UPPER(libname) = ? AND memtype IN ('DATA', 'VIEW')"
        )
        params: List[Any] = [library.upper()]
        if table_name:
            query += " AND UPPER(memname) = ?"
            params.append(table_name.upper())
        query += " ORDER BY memname"
        rows = self.connection.execute_query(query, params)
        return [{"library": lib, "name": name, "kind": kind} for lib, name, kind in rows]

    def columns(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        query = (
            "SELECT name, type, length, format, label, notnull, varnum"
            " FROM dictionary.columns"
            " WHERE UPPER(libname) = ? AND UPPER(memname) = ?"
            " ORDER BY varnum"
        )
        rows = self.connection.execute_query(query, [library.upper(), table_name.upper()])
        return [
            {
                "name": name,
                "type": col_type,
                "length": length,
                "format": fmt,
                "label": label,
                "notnull": notnull,
                "position": varnum,
            }
            for name, col_type, length, fmt, label, notnull, varnum in rows
        ]

    def indexes(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        query = (
            "SELECT indxname, name, indxpos, idxusage, unique, nomiss"
            " FROM dictionary.indexes"
            " WHERE UPPER(libname) = ? AND UPPER(memname) = ?"
            " ORDER BY idxusage, indxname, indxpos"
        )
        rows = self.connection.execute_query(query, [library.upper(), table_name.upper()])
        return [
            {
                "index_name": idx_name,
                "column_name": col_name,
                "position": pos,
                "usage": usage,
                "unique": unique,
                "no_missing": nomiss,
            }
            for idx_name, col_name, pos, usage, unique, nomiss in rows
        ]

    def schema_overrides(self, library: str) -> List[str]:
        query = (
            "SELECT sysvalue FROM dictionary.libnames"
            " WHERE UPPER(libname) = ? AND engine = ? AND sysname = ?"
        )
        rows = self.connection.execute_query(query, [library.upper(), SQLSERVER_ENGINE, SCHEMA_OPTION])
        return [str(value).strip() for (value,) in rows if value and str(value).strip()]


class SnapshotCatalog(Catalog):
    """Catalog served from an in-memory metadata dict.

    The dict has ``tables``, ``columns``, ``indexes`` and ``libnames`` lists.
    Column and index records carry ``library`` and ``table`` keys so they can
    be matched back to their table.
    """

    def __init__(self, metadata: Dict[str, Any]) -> None:
        self.metadata = metadata

    @classmethod
    def from_file(cls, path) -> "SnapshotCatalog":
        from ddl_export_tool.core.snapshot import load_snapshot

        return cls(load_snapshot(path))

    def tables(self, library: str, table_name: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            {"library": rec["library"], "name": rec["name"], "kind": rec.get("kind", "DATA")}
            for rec in self.metadata.get("tables", [])
            if _same(rec.get("library"), library)
            and (not table_name or _same(rec.get("name"), table_name))
        ]

    def columns(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        return self._records("columns", library, table_name)

    def indexes(self, library: str, table_name: str) -> List[Dict[str, Any]]:
        return self._records("indexes", library, table_name)

    def schema_overrides(self, library: str) -> List[str]:
        return [
            rec["schema"]
            for rec in self.metadata.get("libnames", [])
            if _same(rec.get("library"), library)
            and (rec.get("engine") or "").upper() == SQLSERVER_ENGINE
            and rec.get("schema")
        ]

    def _records(self, kind: str, library: str, table_name: str) -> List[Dict[str, Any]]:
        result = []
        for rec in self.metadata.get(kind, []):
            if _same(rec.get("library"), library) and _same(rec.get("table"), table_name):
                item = dict(rec)
                item.pop("library", None)
                item.pop("table", None)
                result.append(item)
        return result


def _same(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").upper() == (right or "").upper()
