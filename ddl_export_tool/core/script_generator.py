from __future__ import annotations

import getpass
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ddl_export_tool.core.dialects import DdlDialect, get_dialect
from ddl_export_tool.core.errors import MalformedIndexMetadata
from ddl_export_tool.core.index_grouper import find_malformed, group_indexes
from ddl_export_tool.core.models import ColumnMeta, IndexGroup, TableMeta, TableMetadata
from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)

DialectRef = Union[str, DdlDialect, None]


def _as_dialect(dialect: DialectRef) -> DdlDialect:
    if isinstance(dialect, DdlDialect):
        return dialect
    return get_dialect(dialect)


def render_table(
    table: TableMeta,
    columns: Sequence[ColumnMeta],
    groups: Sequence[IndexGroup],
    dialect: DialectRef = None,
    schema: Optional[str] = None,
) -> List[str]:
    """Render one table as DDL lines.

    A table without columns renders as an empty list. The same arguments
    always produce the same lines.
    """
    return _as_dialect(dialect).render_table(table, columns, groups, schema)


def render_header(
    dialect: DialectRef = None,
    generated_by: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> List[str]:
    """The comment emitted once at the top of a run."""
    return _as_dialect(dialect).header(
        generated_by or _current_user(),
        generated_at or datetime.now(),
    )


class ScriptGenerator:
    """Builds the DDL lines of a script one described table at a time.

    Index problems found while rendering are collected in ``warnings``.
    """

    def __init__(self, dialect: DialectRef = None, generated_by: Optional[str] = None) -> None:
        self.dialect = _as_dialect(dialect)
        self.generated_by = generated_by
        self.warnings: List[MalformedIndexMetadata] = []

    def header(self, generated_at: Optional[datetime] = None) -> List[str]:
        return render_header(self.dialect, self.generated_by, generated_at)

    def table(self, metadata: TableMetadata, schema: Optional[str] = None) -> List[str]:
        groups = group_indexes(metadata.index_entries)
        self.warnings.extend(find_malformed(metadata.table, groups, metadata.columns))
        lines = render_table(metadata.table, metadata.columns, groups, self.dialect, schema)
        if not lines:
            logger.info(f"{metadata.table.qualified_name} has no columns, nothing to render")
        return lines


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"
