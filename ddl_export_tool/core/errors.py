"""Exceptions raised while collecting metadata and rendering DDL."""
from __future__ import annotations

from typing import Optional


class DdlExportError(Exception):
    """Base class for all export failures.

    Carries the library and table being processed so the message always
    identifies what failed.
    """

    def __init__(self, message: str, library: Optional[str] = None, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.library = library
        self.table = table

    def __str__(self) -> str:
        if self.library and self.table:
            return f"{self.library}.{self.table}: {self.message}"
        if self.library:
            return f"{self.library}: {self.message}"
        return self.message


class CatalogUnavailable(DdlExportError):
    """The metadata catalog could not be queried."""


class NotFound(DdlExportError):
    """The library/table filter matched no tables."""


class UnsupportedDialect(DdlExportError):
    """The requested dialect is not one of the registered dialects."""


class MalformedIndexMetadata(DdlExportError):
    """An index references a column the table does not have.

    Recoverable: reported as a warning, the index is still rendered.
    """
