import os
import sys

import pytest

# Ensure project root is on sys.path so "ddl_export_tool" package is importable
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from ddl_export_tool.core.dialects import get_dialect
from ddl_export_tool.core.errors import UnsupportedDialect
from ddl_export_tool.core.index_grouper import find_malformed, group_indexes
from ddl_export_tool.core.models import ColumnMeta, IndexEntry, TableKind, TableMeta, TableMetadata
from ddl_export_tool.core.script_generator import ScriptGenerator, render_header, render_table


TABLE = TableMeta("work", "test")
COLUMNS = (
    ColumnMeta("x", "num", 8, label="blah", position=1),
    ColumnMeta("y", "char", 4, position=2),
)


def _pk_entries(unique=True, no_missing=True):
    return [
        IndexEntry("pk", "x", 1, "COMPOSITE", unique, no_missing),
        IndexEntry("pk", "y", 2, "COMPOSITE", unique, no_missing),
    ]


def test_group_indexes_folds_members_in_position_order():
    entries = [
        IndexEntry("pk", "y", 2, "COMPOSITE", True, True),
        IndexEntry("pk", "x", 1, "COMPOSITE", True, True),
    ]
    groups = group_indexes(entries)

    assert len(groups) == 1
    assert groups[0].name == "pk"
    assert groups[0].columns == ("x", "y")
    assert groups[0].unique
    assert groups[0].primary_key_candidate


def test_group_indexes_orders_by_usage_then_name():
    entries = [
        IndexEntry("zz", "b", 1, "SIMPLE"),
        IndexEntry("ab", "a", 2, "COMPOSITE"),
        IndexEntry("ab", "c", 1, "COMPOSITE"),
        IndexEntry("mm", "a", 1, "COMPOSITE"),
    ]
    groups = group_indexes(entries)

    assert [g.name for g in groups] == ["ab", "mm", "zz"]
    assert groups[0].columns == ("c", "a")


def test_group_indexes_later_duplicate_position_wins():
    entries = [
        IndexEntry("ix", "a", 1, "SIMPLE"),
        IndexEntry("ix", "b", 1, "SIMPLE"),
    ]
    groups = group_indexes(entries)

    assert groups[0].columns == ("b",)


def test_primary_key_candidate_requires_no_missing_on_every_member():
    entries = [
        IndexEntry("uq", "x", 1, "COMPOSITE", True, True),
        IndexEntry("uq", "y", 2, "COMPOSITE", True, False),
    ]
    group = group_indexes(entries)[0]

    assert group.unique
    assert not group.primary_key_candidate


def test_group_indexes_empty():
    assert group_indexes([]) == []


def test_find_malformed_reports_unknown_members():
    groups = group_indexes([IndexEntry("ix", "x", 1), IndexEntry("ix", "ghost", 2)])
    issues = find_malformed(TABLE, groups, COLUMNS)

    assert len(issues) == 1
    assert "ghost" in str(issues[0])
    assert "work.test" in str(issues[0])


def test_native_scenario_unique_primary_key():
    lines = render_table(TABLE, COLUMNS, group_indexes(_pk_entries()), "native")

    assert lines == [
        "create table work.test(",
        '    x num length=8 label="blah"',
        "   ,y char length=4",
        ");",
        "create unique index pk on work.test (x,y);",
    ]


def test_tsql_scenario_unique_primary_key():
    lines = render_table(TABLE, COLUMNS, group_indexes(_pk_entries()), "tsql")

    assert lines == [
        "IF EXISTS (SELECT * FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_NAME = 'test')",
        "  DROP TABLE [work].[test]",
        "GO",
        "CREATE TABLE [work].[test](",
        "    x DECIMAL(18,2)",
        "   ,y VARCHAR(4)",
        "   ,constraint [pk] PRIMARY KEY (x,y)",
        ")",
        "GO",
        "EXEC sys.sp_addextendedproperty",
        "  @name=N'MS_Description',@value=N'blah',",
        "  @level0type=N'SCHEMA',@level0name=N'work',",
        "  @level1type=N'TABLE',@level1name=N'test',",
        "  @level2type=N'COLUMN',@level2name=N'x'",
        "GO",
    ]


def test_non_unique_index_native_plain_index_tsql_nothing():
    groups = group_indexes(_pk_entries(unique=False))

    native = render_table(TABLE, COLUMNS, groups, "native")
    tsql = render_table(TABLE, COLUMNS, groups, "tsql")

    assert native[-1] == "create index pk on work.test (x,y);"
    assert not any("PRIMARY KEY" in line for line in tsql)
    assert not any("pk" in line for line in tsql)


def test_unsupported_dialect_rejected():
    with pytest.raises(UnsupportedDialect):
        get_dialect("XML")
    with pytest.raises(UnsupportedDialect):
        render_table(TABLE, COLUMNS, [], "XML")


def test_dialect_lookup_is_case_insensitive():
    assert get_dialect("TSQL").name == "tsql"
    assert get_dialect(None).name == "native"


@pytest.mark.parametrize("dialect", ["native", "tsql"])
def test_one_line_per_column_in_order(dialect):
    columns = tuple(ColumnMeta(f"c{i}", "num" if i % 2 else "char", 8, position=i) for i in range(1, 6))
    lines = render_table(TABLE, columns, [], dialect)

    start = next(i for i, line in enumerate(lines) if line.endswith("("))
    column_lines = lines[start + 1:start + 1 + len(columns)]
    for col, line in zip(columns, column_lines):
        assert col.name in line.replace(",", " ").split()


@pytest.mark.parametrize("dialect", ["native", "tsql"])
def test_rendering_is_idempotent(dialect):
    groups = group_indexes(_pk_entries())
    first = render_table(TABLE, COLUMNS, groups, dialect, schema="dbo")
    second = render_table(TABLE, COLUMNS, groups, dialect, schema="dbo")

    assert "\n".join(first).encode() == "\n".join(second).encode()


@pytest.mark.parametrize("dialect", ["native", "tsql"])
def test_zero_columns_render_nothing(dialect):
    assert render_table(TABLE, (), group_indexes(_pk_entries()), dialect) == []


def test_native_format_not_null_and_label_quoting():
    col = ColumnMeta("dt", "num", 8, format="DATETIME19.", label='say "hi"', nullable=False)
    short = ColumnMeta("n", "num", 8, format="8")
    lines = render_table(TABLE, (col, short), [], "native")

    assert lines[1] == '    dt num length=8 format=DATETIME19. not null label="say ""hi"""'
    assert lines[2] == "   ,n num length=8"


def test_tsql_type_mapping_and_schema_override():
    columns = (
        ColumnMeta("stamp", "num", 8, format="datetime19.", nullable=False),
        ColumnMeta("amount", "num", 8, format="COMMA12.2"),
        ColumnMeta("code", "char", 12, label="It's a code"),
    )
    lines = render_table(TABLE, columns, [], "tsql", schema="dbo")

    assert "  DROP TABLE [dbo].[test]" in lines
    assert "CREATE TABLE [dbo].[test](" in lines
    assert "    stamp DATETIME2(3) NOT NULL" in lines
    assert "   ,amount DECIMAL(18,2)" in lines
    assert "   ,code VARCHAR(12)" in lines
    assert "  @name=N'MS_Description',@value=N'It''s a code'," in lines
    assert "  @level0type=N'SCHEMA',@level0name=N'dbo'," in lines
    # drop guard is keyed on the table name only
    assert lines[0].endswith("TABLE_NAME = 'test')")


def test_tsql_character_column_without_length_is_unbounded():
    columns = (
        ColumnMeta("note", "char", 0, position=1),
        ColumnMeta.from_record({"name": "code", "type": "char", "position": 2}),
    )
    lines = render_table(TABLE, columns, [], "tsql")

    assert "    note VARCHAR(MAX)" in lines
    assert "   ,code VARCHAR(MAX)" in lines
    assert not [line for line in lines if "VARCHAR(0)" in line]


def test_views_render_create_view():
    view = TableMeta("work", "v_test", TableKind.VIEW)

    assert render_table(view, COLUMNS, [], "native")[0] == "create view work.v_test("
    tsql = render_table(view, COLUMNS, [], "tsql")
    assert "INFORMATION_SCHEMA.VIEWS" in tsql[0]
    assert tsql[1] == "  DROP VIEW [work].[v_test]"
    assert "CREATE VIEW [work].[v_test](" in tsql


def test_tsql_view_describes_columns_as_view_and_has_no_key():
    view = TableMeta("work", "v_test", TableKind.VIEW)
    groups = group_indexes(_pk_entries())
    assert groups[0].primary_key_candidate

    lines = render_table(view, COLUMNS, groups, "tsql")

    assert "  @level1type=N'VIEW',@level1name=N'v_test'," in lines
    assert not [line for line in lines if "N'TABLE'" in line]
    assert not [line for line in lines if "PRIMARY KEY" in line]
    assert lines[lines.index("CREATE VIEW [work].[v_test](") + 2] == "   ,y VARCHAR(4)"
    assert "   ,constraint [pk] PRIMARY KEY (x,y)" in render_table(TABLE, COLUMNS, groups, "tsql")


def test_index_with_unknown_member_still_rendered():
    groups = group_indexes([
        IndexEntry("pk", "x", 1, "COMPOSITE", True, True),
        IndexEntry("pk", "ghost", 2, "COMPOSITE", True, True),
    ])

    assert render_table(TABLE, COLUMNS, groups, "native")[-1] == "create unique index pk on work.test (x,ghost);"
    assert "   ,constraint [pk] PRIMARY KEY (x,ghost)" in render_table(TABLE, COLUMNS, groups, "tsql")


def test_header_is_a_single_comment():
    from datetime import datetime

    header = render_header("native", "sasdemo", datetime(2024, 3, 1, 12, 30, 5))

    assert header == ["/* native DDL generated by sasdemo on 01MAR2024:12:30:05 */"]


def test_script_generator_header_and_tables_collect_warnings():
    from datetime import datetime

    generator = ScriptGenerator("native", "tester")
    ghost = (IndexEntry("ix", "ghost", 1, "SIMPLE", False, False),)

    header = generator.header(datetime(2024, 1, 1))
    first = generator.table(TableMetadata(TABLE, COLUMNS, tuple(_pk_entries())))
    empty = generator.table(TableMetadata(TableMeta("work", "empty"), (), ghost))
    other = generator.table(TableMetadata(TableMeta("work", "other"), COLUMNS, ghost))

    assert header == ["/* native DDL generated by tester on 01JAN2024:00:00:00 */"]
    assert first[-1] == "create unique index pk on work.test (x,y);"
    assert empty == []
    assert other[-1] == "create index ix on work.other (ghost);"
    assert [w.table for w in generator.warnings] == ["empty", "other"]
