from __future__ import annotations

from typing import List, Optional, Sequence

from ddl_export_tool.core.dialects.base import DdlDialect
from ddl_export_tool.core.models import ColumnMeta, IndexGroup, TableKind, TableMeta


class NativeDialect(DdlDialect):
    """DDL that mirrors the catalog attributes one to one.

    Types pass through verbatim, with length, format and label kept as
    explicit column attributes.
    """

    name = "native"

    def qualified_name(self, table: TableMeta, schema: Optional[str] = None) -> str:
        return f"{table.library}.{table.name}"

    def open_statement(self, table: TableMeta, schema: Optional[str]) -> str:
        verb = "create view" if table.kind is TableKind.VIEW else "create table"
        return f"{verb} {self.qualified_name(table)}("

    def column_definition(self, col: ColumnMeta) -> str:
        parts = [col.name, col.type_name, f"length={col.length}"]
        if col.format and len(col.format) > 1:
            parts.append(f"format={col.format}")
        if not col.nullable:
            parts.append("not null")
        if col.label:
            label = col.label.replace('"', '""')
            parts.append(f'label="{label}"')
        return " ".join(parts)

    def close_statement(self) -> List[str]:
        return [");"]

    def after_create(
        self,
        table: TableMeta,
        columns: Sequence[ColumnMeta],
        groups: Sequence[IndexGroup],
        schema: Optional[str],
    ) -> List[str]:
        lines = []
        for group in groups:
            unique = "unique " if group.unique else ""
            cols = ",".join(group.columns)
            lines.append(f"create {unique}index {group.name} on {self.qualified_name(table)} ({cols});")
        return lines
