from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ddl_export_tool.core.catalog import Catalog, OdbcCatalog, SnapshotCatalog
from ddl_export_tool.core.database import DatabaseConnection
from ddl_export_tool.core.dialects import available_dialects, get_dialect
from ddl_export_tool.core.errors import DdlExportError
from ddl_export_tool.core.exporter import DdlExporter, ExportOptions
from ddl_export_tool.core.snapshot import capture_snapshot, save_snapshot
from ddl_export_tool.utils.config import Config
from ddl_export_tool.utils.logger import setup_logger


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ddl-export",
        description="Render the structure of catalog tables as DDL.",
    )
    ap.add_argument("--library", "-l", help="Library to read tables from (default from config, else 'work')")
    ap.add_argument("--table", "-t", help="Only render this table (case-insensitive)")
    ap.add_argument("--dialect", "-d", type=str.lower,
                    help=f"Target dialect: {', '.join(available_dialects())}")
    ap.add_argument("--output", "-o", help="Destination file, '-' for stdout (default: temporary file)")
    ap.add_argument("--echo", action="store_true", default=None, help="Echo the written DDL to the log")

    src = ap.add_argument_group("catalog source")
    src.add_argument("--snapshot", help="Read the catalog from a JSON snapshot file")
    src.add_argument("--dsn", help="ODBC data source name")
    src.add_argument("--server", help="ODBC server")
    src.add_argument("--database", help="ODBC database")
    src.add_argument("--auth", choices=["dsn", "windows", "sql"], help="ODBC authentication type")
    src.add_argument("--username")
    src.add_argument("--password")
    src.add_argument("--save-snapshot", help="Also save the matched catalog records to this JSON file")

    ap.add_argument("--config", help="Path to settings.json")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return ap


def _catalog_from_args(args: argparse.Namespace, config: Config) -> Catalog:
    if args.snapshot:
        return SnapshotCatalog.from_file(args.snapshot)

    dsn = args.dsn or config.get("catalog", "dsn")
    server = args.server or config.get("catalog", "server")
    if not dsn and not server:
        raise ValueError("No catalog source: pass --snapshot, --dsn or --server")
    connection = DatabaseConnection(
        dsn=dsn,
        server=server,
        database=args.database or config.get("catalog", "database"),
        auth_type=args.auth or config.get("catalog", "auth_type", "dsn"),
        username=args.username,
        password=args.password,
        driver=config.get("catalog", "driver", "SAS"),
        timeout=int(config.get("catalog", "timeout", 30)),
    )
    return OdbcCatalog(connection)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config(Path(args.config) if args.config else None)

    output = args.output if args.output is not None else config.get("export", "output")
    echo = args.echo if args.echo is not None else bool(config.get("export", "echo_to_log", False))

    level_name = (args.log_level or config.get("logging", "level", "INFO")).upper()
    logger = setup_logger(
        "ddl_export_tool",
        log_dir=config.get("logging", "log_dir"),
        level=getattr(logging, level_name, logging.INFO),
        echo_to_console=echo,
    )
    options = ExportOptions(
        library=args.library or config.get("export", "library", "work"),
        table_filter=args.table,
        destination=sys.stdout if output == "-" else output,
        dialect=args.dialect or config.get("export", "dialect", "native"),
        echo_to_log=echo,
    )

    try:
        # Fail on an unknown dialect before opening any catalog
        get_dialect(options.dialect)
        catalog = _catalog_from_args(args, config)
        if args.save_snapshot:
            save_snapshot(args.save_snapshot, capture_snapshot(catalog, options.library, options.table_filter))
            logger.info(f"Catalog snapshot saved to {args.save_snapshot}")
        result = DdlExporter(catalog).run(options)
    except (DdlExportError, ValueError, OSError) as exc:
        logger.debug("Export aborted", exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    for failure in result.failures:
        print(f"FAILED: {failure.table}: {failure.reason}", file=sys.stderr)
    if output != "-":
        print(result.destination)
    return EXIT_OK if result.ok else EXIT_PARTIAL


if __name__ == "__main__":
    raise SystemExit(main())
