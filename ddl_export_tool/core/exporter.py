"""Batch runner: collect, group, render and write DDL for every matched table."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from ddl_export_tool.core.catalog import Catalog
from ddl_export_tool.core.dialects import DEFAULT_DIALECT, get_dialect
from ddl_export_tool.core.errors import DdlExportError, MalformedIndexMetadata
from ddl_export_tool.core.metadata_extractor import MetadataCollector
from ddl_export_tool.core.script_generator import ScriptGenerator
from ddl_export_tool.core.writer import Destination, OutputWriter
from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIBRARY = "work"


@dataclass
class ExportOptions:
    library: str = DEFAULT_LIBRARY
    table_filter: Optional[str] = None
    destination: Destination = None
    dialect: str = DEFAULT_DIALECT
    echo_to_log: bool = False

    def __post_init__(self) -> None:
        if not (self.library or "").strip():
            self.library = DEFAULT_LIBRARY


@dataclass
class TableFailure:
    table: str
    reason: str


@dataclass
class ExportResult:
    destination: str
    tables_rendered: List[str] = field(default_factory=list)
    failures: List[TableFailure] = field(default_factory=list)
    warnings: List[MalformedIndexMetadata] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class DdlExporter:
    """Renders DDL for the tables of one library into one destination.

    Each table is handled on its own: a failure is logged and recorded and
    the batch moves on. Output already written for earlier tables is kept.
    """

    def __init__(
        self,
        catalog: Catalog,
        generated_by: Optional[str] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.collector = MetadataCollector(catalog)
        self.generated_by = generated_by
        self.progress_callback = progress_callback

    def run(self, options: ExportOptions, writer: Optional[OutputWriter] = None) -> ExportResult:
        # Resolve the dialect before touching the catalog or the destination
        dialect = get_dialect(options.dialect)
        generator = ScriptGenerator(dialect, self.generated_by)

        tables = self.collector.find_tables(options.library, options.table_filter)
        schema = self.collector.resolve_schema(options.library) if dialect.uses_schema else None

        if writer is None:
            writer = OutputWriter(options.destination, echo_to_log=options.echo_to_log)
        result = ExportResult(destination=writer.destination)
        logger.info(f"Rendering {len(tables)} tables as {dialect.name} DDL into {writer.destination}")

        try:
            writer.write(generator.header(datetime.now()))
            for table in tables:
                if self.progress_callback:
                    self.progress_callback(f"Rendering {table.qualified_name}...")
                try:
                    writer.write(generator.table(self.collector.describe(table), schema))
                except (DdlExportError, ValueError) as exc:
                    logger.error(f"Failed to render {table.qualified_name}: {exc}", exc_info=True)
                    result.failures.append(TableFailure(table.qualified_name, str(exc)))
                    continue
                result.tables_rendered.append(table.qualified_name)
        finally:
            result.warnings.extend(generator.warnings)
            writer.echo()

        logger.info(
            f"Export complete: {len(result.tables_rendered)} rendered, "
            f"{len(result.failures)} failed, {len(result.warnings)} warnings"
        )
        return result
