from __future__ import annotations

from typing import List, Optional, Sequence

from ddl_export_tool.core.dialects.base import DdlDialect
from ddl_export_tool.core.models import ColumnMeta, IndexGroup, TableKind, TableMeta


DATETIME_TYPE = "DATETIME2(3)"
NUMERIC_TYPE = "DECIMAL(18,2)"
UNBOUNDED_TEXT_TYPE = "VARCHAR(MAX)"
BATCH_SEPARATOR = "GO"


class TsqlDialect(DdlDialect):
    """SQL Server DDL.

    SQL Server has no length/format column attributes, so types are inferred
    from them instead. Every statement is its own batch, tables are dropped
    before they are created, and labels become MS_Description extended
    properties. Only indexes that qualify as primary keys are kept, and views
    get none.
    """

    name = "tsql"
    uses_schema = True

    def qualified_name(self, table: TableMeta, schema: Optional[str] = None) -> str:
        return f"[{schema or table.library}].[{table.name}]"

    def before_create(self, table: TableMeta, schema: Optional[str]) -> List[str]:
        if table.kind is TableKind.VIEW:
            view, obj = "VIEWS", "VIEW"
        else:
            view, obj = "TABLES", "TABLE"
        return [
            f"IF EXISTS (SELECT * FROM INFORMATION_SCHEMA.{view} WHERE TABLE_NAME = {_literal(table.name)})",
            f"  DROP {obj} {self.qualified_name(table, schema)}",
            BATCH_SEPARATOR,
        ]

    def open_statement(self, table: TableMeta, schema: Optional[str]) -> str:
        verb = "CREATE VIEW" if table.kind is TableKind.VIEW else "CREATE TABLE"
        return f"{verb} {self.qualified_name(table, schema)}("

    def column_definition(self, col: ColumnMeta) -> str:
        definition = f"{col.name} {self.column_type(col)}"
        if not col.nullable:
            definition += " NOT NULL"
        return definition

    @staticmethod
    def column_type(col: ColumnMeta) -> str:
        if (col.format or "").upper().startswith("DATETIME"):
            return DATETIME_TYPE
        if col.is_numeric:
            return NUMERIC_TYPE
        if col.length < 1:
            return UNBOUNDED_TEXT_TYPE
        return f"VARCHAR({col.length})"

    def inline_constraints(self, table: TableMeta, groups: Sequence[IndexGroup]) -> List[str]:
        # Views cannot carry constraints
        if table.kind is TableKind.VIEW:
            return []
        return [
            f"constraint [{group.name}] PRIMARY KEY ({','.join(group.columns)})"
            for group in groups
            if group.primary_key_candidate
        ]

    def close_statement(self) -> List[str]:
        return [")", BATCH_SEPARATOR]

    def after_create(
        self,
        table: TableMeta,
        columns: Sequence[ColumnMeta],
        groups: Sequence[IndexGroup],
        schema: Optional[str],
    ) -> List[str]:
        lines = []
        level0 = schema or table.library
        level1 = "VIEW" if table.kind is TableKind.VIEW else "TABLE"
        for col in columns:
            if not col.label:
                continue
            lines.extend([
                "EXEC sys.sp_addextendedproperty",
                f"  @name=N'MS_Description',@value=N{_literal(col.label)},",
                f"  @level0type=N'SCHEMA',@level0name=N{_literal(level0)},",
                f"  @level1type=N'{level1}',@level1name=N{_literal(table.name)},",
                f"  @level2type=N'COLUMN',@level2name=N{_literal(col.name)}",
                BATCH_SEPARATOR,
            ])
        return lines


def _literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"
