"""
File content reader.

Reads workspace files for content scoring. Reads are blocking, so they run
in a worker thread; a file that is missing, too large or not valid UTF-8
comes back as None and the caller skips it.
"""

import asyncio
from pathlib import Path
from typing import Optional

from issuescope.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_FILE_BYTES = 2_000_000


class FileContentReader:
    """Async reader keyed by absolute path."""

    def __init__(self, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES):
        self.max_file_bytes = max_file_bytes

    async def read(self, path: str) -> Optional[str]:
        """Return the file's text, or None if it cannot be used."""
        return await asyncio.to_thread(self.read_sync, path)

    def read_sync(self, path: str) -> Optional[str]:
        file_path = Path(path)
        try:
            if file_path.stat().st_size > self.max_file_bytes:
                logger.debug("Skipping oversized file", path=path)
                return None
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable file", path=path, error=type(e).__name__)
            return None
