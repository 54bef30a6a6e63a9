"""
Output sinks: the storage the CSV file is created in and the system clipboard.

Both report a ``SinkResult`` instead of raising, so the export session can
decide what to tell the user.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pyperclip

logger = logging.getLogger(__name__)


@dataclass
class SinkResult:
    """Outcome of a storage or clipboard write."""
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> 'SinkResult':
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> 'SinkResult':
        return cls(success=False, error=error)


class VaultStorage:
    """Creates files in the root folder of a document vault."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def create(self, name: str, content: str) -> SinkResult:
        """Create ``name`` with ``content``. Existing files are never overwritten."""
        path = self.root / name

        if path.exists():
            return SinkResult.failed("File already exists.")

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # newline='' keeps the exported line endings as produced
            with open(path, 'x', encoding='utf-8', newline='') as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to create {path}: {e}")
            return SinkResult.failed(str(e))

        logger.info(f"Created {path} ({len(content)} characters)")
        return SinkResult.ok()


class SystemClipboard:
    """Copies text to the system clipboard."""

    def write_text(self, text: str) -> SinkResult:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            logger.error(f"Clipboard write failed: {e}")
            return SinkResult.failed(str(e))

        logger.debug(f"Copied {len(text)} characters to the clipboard")
        return SinkResult.ok()
