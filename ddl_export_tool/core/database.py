"""ODBC connection helper for the metadata catalog.
Supports a configured DSN, or a driver/server/database triple with
Windows integrated or SQL login authentication.
"""
from __future__ import annotations

import re
from typing import Any, Sequence

import pyodbc

from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    def __init__(
        self,
        dsn: str | None = None,
        server: str | None = None,
        database: str | None = None,
        auth_type: str = "dsn",
        username: str | None = None,
        password: str | None = None,
        driver: str = "SAS",
        timeout: int = 30,
    ) -> None:
        self.dsn = dsn
        self.server = server
        self.database = database
        self.auth_type = (auth_type or "dsn").lower()
        self.username = username
        self.password = password
        self.driver = driver
        self.timeout = timeout

    def _conn_str(self) -> str:
        if self.dsn:
            parts = [f"DSN={self.dsn};"]
        else:
            server = (self.server or "").strip()
            if not server:
                raise ValueError("Either a DSN or a server name is required")
            if re.search(r'[;<>"\\]', server):
                raise ValueError(f"Invalid characters in server name: {server}")
            parts = [
                f"Driver={{{self.driver}}};",
                f"Server={server};",
            ]
            if self.database:
                parts.append(f"Database={self.database};")

        if self.auth_type == "windows":
            parts.append("Trusted_Connection=yes;")
        elif self.auth_type == "sql":
            if self.username:
                parts.append(f"UID={self.username};")
            if self.password:
                parts.append(f"PWD={self.password};")
        # dsn: credentials live in the data source definition
        return "".join(parts)

    def describe(self) -> str:
        return self.dsn or f"{self.server}/{self.database or ''}"

    def test_connection(self) -> tuple[bool, str]:
        try:
            logger.info(f"Testing connection to {self.describe()} using {self.auth_type} auth")
            with pyodbc.connect(self._conn_str(), timeout=self.timeout, autocommit=True):
                logger.info("Connection test succeeded")
                return True, "Connection succeeded"
        except pyodbc.Error as exc:
            logger.error(f"Connection test failed: {exc}", exc_info=True)
            return False, str(exc)

    def execute_query(self, query: str, params: Sequence[Any] = ()) -> list[tuple]:
        logger.debug(f"Executing catalog query: {query} params={list(params)}")
        with pyodbc.connect(self._conn_str(), timeout=self.timeout, autocommit=True) as conn:
            cursor = conn.cursor()
            cursor.execute(query, *params)
            return [tuple(row) for row in cursor.fetchall()]
