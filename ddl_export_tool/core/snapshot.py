from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ddl_export_tool.core.catalog import SQLSERVER_ENGINE, Catalog
from ddl_export_tool.core.errors import CatalogUnavailable


SNAPSHOT_VERSION = 1


def save_snapshot(path: str | Path, metadata: Dict[str, Any]) -> None:
    """Save catalog metadata to a snapshot file.

    The snapshot is a simple JSON document with a version header and a
    "metadata" payload so the format can evolve without breaking older
    files.
    """

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": SNAPSHOT_VERSION, "metadata": metadata}
    p.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")


def load_snapshot(path: str | Path) -> Dict[str, Any]:
    """Load catalog metadata from a snapshot file.

    Accepts both the wrapped format {"version": .., "metadata": ..}
    and a plain JSON metadata dict.
    """

    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "metadata" in data:
        return data["metadata"]  # type: ignore[return-value]
    if isinstance(data, dict) and "tables" in data:
        return data  # type: ignore[return-value]
    raise ValueError(f"Snapshot file does not contain catalog metadata: {p}")


def capture_snapshot(catalog: Catalog, library: str, table_filter: Optional[str] = None) -> Dict[str, Any]:
    """Copy the records matching a library/table filter out of any catalog."""
    try:
        tables = catalog.tables(library, table_filter)
        metadata: Dict[str, Any] = {"tables": tables, "columns": [], "indexes": [], "libnames": []}
        for table in tables:
            lib, name = table["library"], table["name"]
            for col in catalog.columns(lib, name):
                metadata["columns"].append({"library": lib, "table": name, **col})
            for idx in catalog.indexes(lib, name):
                metadata["indexes"].append({"library": lib, "table": name, **idx})
        for schema in catalog.schema_overrides(library):
            metadata["libnames"].append({"library": library, "engine": SQLSERVER_ENGINE, "schema": schema})
    except Exception as exc:
        raise CatalogUnavailable(f"Snapshot capture failed: {exc}", library=library) from exc
    return metadata
