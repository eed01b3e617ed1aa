"""Unit tests for the ODBC connection and catalog."""
from __future__ import annotations

import unittest
from unittest.mock import MagicMock, Mock, patch
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pyodbc

from ddl_export_tool.core.catalog import OdbcCatalog
from ddl_export_tool.core.database import DatabaseConnection
from ddl_export_tool.core.errors import CatalogUnavailable
from ddl_export_tool.core.metadata_extractor import MetadataCollector


class TestDatabaseConnection(unittest.TestCase):
    """Test connection string handling and query execution."""

    def test_server_validation_rejects_invalid_characters(self):
        with self.assertRaises(ValueError):
            DatabaseConnection(server="server;DROP TABLE", auth_type="sql")._conn_str()

    def test_missing_dsn_and_server_raises_error(self):
        with self.assertRaises(ValueError):
            DatabaseConnection()._conn_str()

    def test_dsn_connection_string(self):
        conn_str = DatabaseConnection(dsn="SASApp")._conn_str()
        self.assertEqual(conn_str, "DSN=SASApp;")

    def test_sql_login_connection_string(self):
        conn = DatabaseConnection(
            server="sashost", database="meta", auth_type="sql", username="sasdemo", password="pw"
        )
        conn_str = conn._conn_str()
        self.assertIn("Driver={SAS};", conn_str)
        self.assertIn("Server=sashost;", conn_str)
        self.assertIn("UID=sasdemo;", conn_str)
        self.assertIn("PWD=pw;", conn_str)

    def test_windows_auth_connection_string(self):
        conn_str = DatabaseConnection(server="sashost", auth_type="Windows")._conn_str()
        self.assertIn("Trusted_Connection=yes;", conn_str)

    @patch("ddl_export_tool.core.database.pyodbc.connect")
    def test_execute_query_passes_parameters(self, mock_connect):
        cursor = MagicMock()
        cursor.fetchall.return_value = [("WORK", "TEST", "DATA")]
        mock_connect.return_value.__enter__.return_value.cursor.return_value = cursor

        rows = DatabaseConnection(dsn="SASApp").execute_query("SELECT ?", ["WORK"])

        cursor.execute.assert_called_once_with("SELECT ?", "WORK")
        self.assertEqual(rows, [("WORK", "TEST", "DATA")])

    @patch("ddl_export_tool.core.database.pyodbc.connect")
    def test_connection_failure_reported(self, mock_connect):
        mock_connect.side_effect = pyodbc.Error("08001", "unreachable")

        ok, message = DatabaseConnection(dsn="SASApp").test_connection()

        self.assertFalse(ok)
        self.assertIn("unreachable", message)


class TestOdbcCatalog(unittest.TestCase):
    """Test that catalog records are queried and shaped correctly."""

    def setUp(self):
        self.connection = Mock(spec=DatabaseConnection)
        self.catalog = OdbcCatalog(self.connection)

    def test_tables_filters_case_insensitively(self):
        self.connection.execute_query.return_value = [("WORK", "TEST", "DATA")]

        records = self.catalog.tables("work", "test")

        query, params = self.connection.execute_query.call_args[0]
        self.assertIn("UPPER(libname) = ?", query)
        self.assertIn("UPPER(memname) = ?", query)
        self.assertEqual(params, ["WORK", "TEST"])
        self.assertEqual(records, [{"library": "WORK", "name": "TEST", "kind": "DATA"}])

    def test_tables_without_filter(self):
        self.connection.execute_query.return_value = []

        self.catalog.tables("work")

        query, params = self.connection.execute_query.call_args[0]
        self.assertNotIn("memname) = ?", query)
        self.assertEqual(params, ["WORK"])

    def test_columns_are_mapped_to_records(self):
        self.connection.execute_query.return_value = [
            ("x", "num", 8, "", "blah", "yes", 1),
        ]

        records = self.catalog.columns("work", "test")

        self.assertEqual(records[0]["name"], "x")
        self.assertEqual(records[0]["label"], "blah")
        self.assertEqual(records[0]["position"], 1)

    def test_indexes_are_mapped_to_records(self):
        self.connection.execute_query.return_value = [
            ("pk", "x", 1, "COMPOSITE", 1, 1),
            ("pk", "y", 2, "COMPOSITE", 1, 1),
        ]

        records = self.catalog.indexes("work", "test")

        self.assertEqual([r["column_name"] for r in records], ["x", "y"])
        self.assertTrue(all(r["unique"] for r in records))

    def test_schema_overrides_skip_blank_values(self):
        self.connection.execute_query.return_value = [("dbo ",), ("",), (None,)]

        self.assertEqual(self.catalog.schema_overrides("sales"), ["dbo"])

    def test_query_failure_surfaces_as_catalog_unavailable(self):
        self.connection.execute_query.side_effect = pyodbc.Error("HY000", "dictionary not available")

        with self.assertRaises(CatalogUnavailable):
            MetadataCollector(self.catalog).find_tables("work")
        with self.assertRaises(CatalogUnavailable):
            MetadataCollector(self.catalog).resolve_schema("work")


if __name__ == "__main__":
    unittest.main()
