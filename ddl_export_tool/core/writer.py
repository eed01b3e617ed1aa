from __future__ import annotations

import tempfile
from pathlib import Path
from typing import IO, Iterable, List, Optional, Union

from ddl_export_tool.utils.logger import get_echo_logger, get_logger

logger = get_logger(__name__)
echo_logger = get_echo_logger()

Destination = Union[str, Path, IO[str], None]


class OutputWriter:
    """Appends rendered DDL lines to a file or text stream.

    Without a destination a fresh temporary ``.sql`` file is allocated.
    This is the only component that performs output I/O.
    """

    def __init__(self, destination: Destination = None, echo_to_log: bool = False) -> None:
        self.echo_to_log = echo_to_log
        self.stream: Optional[IO[str]] = None
        self.path: Optional[Path] = None
        self._written: List[str] = []

        if destination is None:
            with tempfile.NamedTemporaryFile(prefix="ddl_", suffix=".sql", delete=False) as tmp:
                self.path = Path(tmp.name)
            logger.info(f"No destination given, writing to {self.path}")
        elif isinstance(destination, (str, Path)):
            self.path = Path(destination)
            self.path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self.stream = destination

    @property
    def destination(self) -> str:
        if self.path is not None:
            return str(self.path)
        return getattr(self.stream, "name", "<stream>")

    def write(self, lines: Iterable[str]) -> None:
        lines = list(lines)
        if not lines:
            return
        text = "".join(f"{line}\n" for line in lines)
        if self.path is not None:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text)
        else:
            self.stream.write(text)
            self.stream.flush()
            self._written.extend(lines)

    def echo(self) -> None:
        """Copy everything written so far to the log, line by line."""
        if not self.echo_to_log:
            return
        if self.path is not None:
            if not self.path.exists():
                return
            lines = self.path.read_text(encoding="utf-8").splitlines()
        else:
            lines = self._written
        for line in lines:
            echo_logger.info(line)
