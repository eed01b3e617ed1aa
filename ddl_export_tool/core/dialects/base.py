from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from ddl_export_tool.core.models import ColumnMeta, IndexGroup, TableMeta


class DdlDialect(ABC):
    """Renders the metadata model of one table as DDL lines.

    Subclasses only decide how names, columns and indexes are spelled; the
    overall layout (opening statement, one line per column with a leading
    comma after the first, closing statement) is shared.
    """

    name: str = ""
    # Whether render_table() wants a resolved schema name
    uses_schema: bool = False

    def header(self, generated_by: str, generated_at: datetime) -> List[str]:
        stamp = generated_at.strftime("%d%b%Y:%H:%M:%S").upper()
        return [f"/* {self.name} DDL generated by {generated_by} on {stamp} */"]

    def render_table(
        self,
        table: TableMeta,
        columns: Sequence[ColumnMeta],
        groups: Sequence[IndexGroup],
        schema: Optional[str] = None,
    ) -> List[str]:
        if not columns:
            return []
        lines: List[str] = []
        lines.extend(self.before_create(table, schema))
        lines.append(self.open_statement(table, schema))
        body = [self.column_definition(col) for col in columns]
        body.extend(self.inline_constraints(table, groups))
        for i, item in enumerate(body):
            lines.append(("    " if i == 0 else "   ,") + item)
        lines.extend(self.close_statement())
        lines.extend(self.after_create(table, columns, groups, schema))
        return lines

    def before_create(self, table: TableMeta, schema: Optional[str]) -> List[str]:
        return []

    @abstractmethod
    def qualified_name(self, table: TableMeta, schema: Optional[str] = None) -> str:
        ...

    @abstractmethod
    def open_statement(self, table: TableMeta, schema: Optional[str]) -> str:
        ...

    @abstractmethod
    def column_definition(self, col: ColumnMeta) -> str:
        ...

    def inline_constraints(self, table: TableMeta, groups: Sequence[IndexGroup]) -> List[str]:
        return []

    @abstractmethod
    def close_statement(self) -> List[str]:
        ...

    def after_create(
        self,
        table: TableMeta,
        columns: Sequence[ColumnMeta],
        groups: Sequence[IndexGroup],
        schema: Optional[str],
    ) -> List[str]:
        return []
