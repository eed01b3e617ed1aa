from __future__ import annotations

import re
from typing import List, Optional

from ddl_export_tool.core.catalog import Catalog
from ddl_export_tool.core.errors import CatalogUnavailable, NotFound
from ddl_export_tool.core.models import ColumnMeta, IndexEntry, TableKind, TableMeta, TableMetadata
from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)

LIBRARY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,7}$")
TABLE_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,31}$")


class MetadataCollector:
    """Pulls table, column and index metadata out of a catalog."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    def find_tables(self, library: str, table_filter: Optional[str] = None) -> List[TableMeta]:
        _validate(library, LIBRARY_PATTERN, "library")
        if table_filter:
            _validate(table_filter, TABLE_PATTERN, "table")
        logger.info(f"Looking up tables in library={library} table_filter={table_filter}")

        try:
            records = self.catalog.tables(library, table_filter or None)
        except Exception as exc:
            raise CatalogUnavailable(f"Table lookup failed: {exc}", library=library) from exc

        tables = []
        for rec in records:
            try:
                kind = TableKind.from_catalog(rec.get("kind", "DATA"))
            except ValueError as exc:
                raise CatalogUnavailable(str(exc), library=library, table=rec.get("name")) from exc
            tables.append(TableMeta(library=rec["library"], name=rec["name"], kind=kind))

        if not tables:
            what = f"table {table_filter}" if table_filter else "any table"
            raise NotFound(f"No match for {what}", library=library)

        logger.info(f"Found {len(tables)} tables in {library}")
        return tables

    def describe(self, table: TableMeta) -> TableMetadata:
        try:
            column_records = self.catalog.columns(table.library, table.name)
            index_records = self.catalog.indexes(table.library, table.name)
        except Exception as exc:
            raise CatalogUnavailable(
                f"Column/index lookup failed: {exc}", library=table.library, table=table.name
            ) from exc

        try:
            columns = sorted((ColumnMeta.from_record(rec) for rec in column_records), key=lambda c: c.position)
            entries = tuple(IndexEntry.from_record(rec) for rec in index_records)
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogUnavailable(
                f"Malformed column/index record: {exc!r}", library=table.library, table=table.name
            ) from exc

        logger.debug(f"{table.qualified_name}: {len(columns)} columns, {len(entries)} index entries")
        return TableMetadata(table=table, columns=tuple(columns), index_entries=entries)

    def resolve_schema(self, library: str) -> str:
        """Schema for SQL Server output: the registered override, else the library itself."""
        try:
            overrides = self.catalog.schema_overrides(library)
        except Exception as exc:
            raise CatalogUnavailable(f"Schema lookup failed: {exc}", library=library) from exc

        if not overrides:
            return library
        if len(overrides) > 1:
            logger.warning(f"Library {library} has {len(overrides)} schema overrides, using {overrides[0]}")
        return overrides[0]


def _validate(value: str, pattern: re.Pattern, what: str) -> None:
    if not value or not pattern.match(value):
        raise ValueError(f"Invalid {what} name: {value!r}")
