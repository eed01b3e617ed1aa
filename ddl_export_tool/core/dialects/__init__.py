"""
DDL dialects.

Each dialect implements DdlDialect and knows how to spell the metadata model
of one table as DDL lines.
"""
from __future__ import annotations

from typing import Dict, Type

from ddl_export_tool.core.dialects.base import DdlDialect
from ddl_export_tool.core.dialects.native import NativeDialect
from ddl_export_tool.core.dialects.tsql import TsqlDialect
from ddl_export_tool.core.errors import UnsupportedDialect


DEFAULT_DIALECT = "native"

_DIALECT_REGISTRY: Dict[str, Type[DdlDialect]] = {
    "native": NativeDialect,
    "tsql": TsqlDialect,
}


def available_dialects() -> list[str]:
    return sorted(_DIALECT_REGISTRY)


def get_dialect(name: str | None = None) -> DdlDialect:
    """Return an instance of the named dialect (case-insensitive).

    Raises:
        UnsupportedDialect: if the name is not registered.
    """
    dialect_name = (name or DEFAULT_DIALECT).strip().lower()
    try:
        dialect_cls = _DIALECT_REGISTRY[dialect_name]
    except KeyError as exc:
        available = ", ".join(available_dialects())
        raise UnsupportedDialect(
            f"Unknown DDL dialect: {name!r}. Available dialects: {available}."
        ) from exc
    return dialect_cls()
