"""File-system primitives used by the report writers.

Directory creation, whole-file reads and whole-file writes run in a worker
thread so they never block the event loop. Appends are small and stay
synchronous.

Text that cannot be encoded (lone surrogates from a badly decoded response
body, for instance) is written as backslash escapes rather than failing the
whole report.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from contractreport.errors import SinkError

logger = logging.getLogger(__name__)


class OutputSink:
    """Minimal file-system contract with explicit failure signalling."""

    encoding = "utf-8"
    encoding_errors = "backslashreplace"

    def prepare(self, path: Path) -> bool:
        """Report whether output from a previous run exists at ``path``."""
        if path.exists():
            logger.info("File exists at %s, will be overwritten...", path)
            return True
        return False

    def remove(self, path: Path) -> None:
        """Remove a stale report. Failure is logged and otherwise ignored."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Cannot remove stale report %s: %s", path, exc)

    async def ensure_directory(self, path: Path) -> SinkError | None:
        """Create every missing directory above ``path``.

        Returns the error instead of raising it.
        """
        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            return SinkError("create directory for", path, exc)
        return None

    def append(self, path: Path, text: str) -> None:
        try:
            with path.open("a", encoding=self.encoding, errors=self.encoding_errors) as fh:
                fh.write(text)
        except (OSError, UnicodeError) as exc:
            raise SinkError("append to", path, exc) from exc

    async def write_whole(self, path: Path, text: str) -> None:
        """Replace ``path`` with ``text``; readers see the old file or the new one."""
        try:
            await asyncio.to_thread(self._replace, path, text)
        except (OSError, UnicodeError) as exc:
            raise SinkError("write", path, exc) from exc

    async def read_all(self, path: Path) -> str:
        try:
            return await asyncio.to_thread(path.read_text, encoding=self.encoding)
        except (OSError, UnicodeError) as exc:
            raise SinkError("read", path, exc) from exc

    def _replace(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, errors=self.encoding_errors) as fh:
                fh.write(text)
            # mkstemp creates the file owner-only
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
