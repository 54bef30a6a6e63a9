"""
Export session coordination.

One ``ExportSession`` drives a single export: it presents the discovered
tables, collects the user's selection, converts the selected tables, writes
the combined text through the storage sink, advances the file number and
optionally copies the result to the clipboard.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .converter import ConversionConfig, convert, join_tables
from .errors import (
    ClipboardWriteError,
    EmptyResultError,
    EmptySelectionError,
    PreconditionError,
    SelectionClosedError,
    StorageWriteError,
    TableExportError,
)
from .selection import SelectionState
from .settings import PluginSettings, advance_counter, output_filename
from .tables import Table

logger = logging.getLogger(__name__)

NO_TABLE_FOUND = "No table was found. No CSV file was written."
NO_TABLES_SELECTED = "No tables selected."
NO_DATA_TO_EXPORT = "No data to export."
CLIPBOARD_FAILED = "There was an error with copying the contents to the clipboard."


class SessionState(Enum):
    """States of one export session."""
    IDLE = "idle"
    PRESENTING = "presenting"
    EXPORTING = "exporting"
    PERSISTING = "persisting"
    TERMINAL = "terminal"


@dataclass
class ExportOutcome:
    """What happened during an export session."""
    success: bool
    state: SessionState
    selected_indices: List[int] = field(default_factory=list)
    filename: Optional[str] = None
    body: str = ""
    copied_to_clipboard: bool = False
    notices: List[str] = field(default_factory=list)
    error: Optional[TableExportError] = None
    clipboard_error: Optional[ClipboardWriteError] = None
    export_timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary."""
        return {
            'success': self.success,
            'state': self.state.value,
            'selected_indices': self.selected_indices,
            'filename': self.filename,
            'body_length': len(self.body),
            'copied_to_clipboard': self.copied_to_clipboard,
            'notices': self.notices,
            'error': self.error.to_dict() if self.error else None,
            'clipboard_error': self.clipboard_error.to_dict() if self.clipboard_error else None,
            'export_timestamp': self.export_timestamp.isoformat()
        }


class ExportSession:
    """Selection and batch export of the tables of one document."""

    def __init__(self,
                 tables: Sequence[Table],
                 settings: PluginSettings,
                 storage,
                 clipboard=None,
                 notify: Optional[Callable[[str], None]] = None,
                 save_settings: Optional[Callable[[PluginSettings], None]] = None):
        """
        Args:
            tables: Tables of the active document, in document order
            settings: Current settings; the file number is advanced in place
            storage: Object with ``create(name, content) -> SinkResult``
            clipboard: Object with ``write_text(text) -> SinkResult``
            notify: Shows a short message to the user
            save_settings: Persists ``settings`` after a successful export
        """
        self.tables = list(tables)
        self.settings = settings
        self.storage = storage
        self.clipboard = clipboard
        self.notify = notify
        self.save_settings = save_settings

        self.state = SessionState.IDLE
        self.selection: Optional[SelectionState] = None
        self.notices: List[str] = []

    def open(self) -> bool:
        """Start presenting the tables. Returns False when there is nothing to present."""
        if self.state is not SessionState.IDLE:
            raise SelectionClosedError(f"Session cannot be opened from state '{self.state.value}'")

        if not self.tables:
            self._report(NO_TABLE_FOUND, level=logging.WARNING)
            self.state = SessionState.TERMINAL
            return False

        self.selection = SelectionState(len(self.tables))
        self.state = SessionState.PRESENTING
        logger.info(f"Presenting {len(self.tables)} tables for selection")
        return True

    def toggle(self, index: int, included: bool) -> None:
        """Include or exclude the table at ``index``."""
        if self.state is not SessionState.PRESENTING:
            raise SelectionClosedError(f"Cannot change the selection in state '{self.state.value}'")
        self.selection.toggle(index, included)

    def export(self) -> ExportOutcome:
        """Export the selected tables. The session is terminal afterwards."""
        if self.state is not SessionState.PRESENTING:
            raise SelectionClosedError(f"Cannot export in state '{self.state.value}'")

        self.state = SessionState.EXPORTING
        indices = self.selection.confirm()
        outcome = ExportOutcome(success=False, state=self.state, selected_indices=indices)

        try:
            outcome.body = self._build_body(indices)

            self.state = SessionState.PERSISTING
            outcome.filename = self._persist(outcome.body)
            outcome.success = True

            if self.settings.save_to_clipboard_too:
                self._copy_to_clipboard(outcome)
            else:
                self._report(f"The file {outcome.filename} was successfully created in your vault.")

        except TableExportError as e:
            outcome.error = e
            self._report(self._notice_for(e), level=logging.WARNING)

        finally:
            self.state = SessionState.TERMINAL
            self.selection = None

        outcome.state = self.state
        outcome.notices = list(self.notices)
        return outcome

    def cancel(self) -> None:
        """Close the session without exporting."""
        logger.info("Export cancelled")
        self.state = SessionState.TERMINAL
        self.selection = None

    def _build_body(self, indices: List[int]) -> str:
        if not indices:
            raise EmptySelectionError(NO_TABLES_SELECTED)

        config = ConversionConfig.from_settings(self.settings)
        body = join_tables(convert(self.tables[index], config) for index in indices)

        if len(body) == 0:
            raise EmptyResultError(NO_DATA_TO_EXPORT, context={'selected': indices})

        logger.info(f"Converted {len(indices)} tables into {len(body)} characters")
        return body

    def _persist(self, body: str) -> str:
        filename = output_filename(self.settings)
        result = self.storage.create(filename, body)

        if not result.success:
            raise StorageWriteError(result.error or "Unknown storage error", context={'filename': filename})

        self.settings.file_number = advance_counter(self.settings.file_number)
        logger.info(f"Next file number is {self.settings.file_number}")

        if self.save_settings:
            try:
                self.save_settings(self.settings)
            except OSError as e:
                logger.error(f"Failed to save settings: {e}")

        return filename

    def _copy_to_clipboard(self, outcome: ExportOutcome) -> None:
        if self.clipboard is None:
            result_error = "No clipboard available"
        else:
            result = self.clipboard.write_text(outcome.body)
            result_error = None if result.success else (result.error or "Unknown clipboard error")

        if result_error is None:
            outcome.copied_to_clipboard = True
            self._report(f"The file {outcome.filename} was successfully created in your vault. "
                         f"The contents was also copied to the clipboard.")
        else:
            # The file stays created and the counter stays advanced
            outcome.clipboard_error = ClipboardWriteError(result_error, context={'filename': outcome.filename})
            self._report(CLIPBOARD_FAILED, level=logging.WARNING)

    def _notice_for(self, error: TableExportError) -> str:
        if isinstance(error, StorageWriteError):
            return f"Error: {error}"
        return str(error)

    def _report(self, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        self.notices.append(message)
        if self.notify:
            self.notify(message)


def present_error(error: PreconditionError, notify: Optional[Callable[[str], None]] = None) -> str:
    """Log a precondition failure and show it to the user."""
    message = str(error)
    logger.warning(message)
    if notify:
        notify(message)
    return message
