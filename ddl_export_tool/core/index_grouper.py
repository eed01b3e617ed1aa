"""Fold index membership records into one group per index."""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from ddl_export_tool.core.errors import MalformedIndexMetadata
from ddl_export_tool.core.models import ColumnMeta, IndexEntry, IndexGroup, TableMeta
from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)


def group_indexes(entries: Iterable[IndexEntry]) -> List[IndexGroup]:
    """Group index entries by index name.

    Entries are ordered by (usage, index name, position) first, so members of
    one index are contiguous. Groups come out in first-seen order. If two
    entries claim the same position in the same index, the later one wins.
    """
    ordered = sorted(entries, key=lambda e: e.sort_key)

    groups: List[IndexGroup] = []
    current: List[IndexEntry] = []
    for entry in ordered:
        if current and entry.index_name.upper() != current[0].index_name.upper():
            groups.append(_fold(current))
            current = []
        current.append(entry)
    if current:
        groups.append(_fold(current))
    return groups


def _fold(entries: Sequence[IndexEntry]) -> IndexGroup:
    by_position: Dict[int, IndexEntry] = {}
    for entry in entries:
        if entry.position in by_position:
            logger.debug(
                f"Index {entry.index_name}: position {entry.position} listed twice, "
                f"keeping {entry.column_name}"
            )
        by_position[entry.position] = entry

    members = [by_position[pos] for pos in sorted(by_position)]
    unique = all(e.unique for e in members)
    return IndexGroup(
        name=entries[0].index_name,
        unique=unique,
        columns=tuple(e.column_name for e in members),
        primary_key_candidate=unique and all(e.no_missing for e in members),
    )


def find_malformed(
    table: TableMeta, groups: Iterable[IndexGroup], columns: Iterable[ColumnMeta]
) -> List[MalformedIndexMetadata]:
    """Report index members that are not columns of the table."""
    known = {col.name.upper() for col in columns}
    issues = []
    for group in groups:
        missing = [name for name in group.columns if name.upper() not in known]
        if missing:
            issue = MalformedIndexMetadata(
                f"index {group.name} references unknown column(s) {', '.join(missing)}",
                library=table.library,
                table=table.name,
            )
            logger.warning(str(issue))
            issues.append(issue)
    return issues
