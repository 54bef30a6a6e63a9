"""
Command surface of the exporter.

Holds the loaded settings, decides whether the export command is available
for the active view, and starts an export session when it is invoked.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Optional

from .coordinator import ExportOutcome, ExportSession, present_error
from .errors import PreconditionError
from .settings import PluginSettings, SettingsStore, update_setting
from .tables import TableSource

logger = logging.getLogger(__name__)

COMMAND_ID = 'table-to-csv-exporter'
COMMAND_NAME = 'Export table to CSV file'

READING_MODE_REQUIRED = 'This command only works on panes in reading mode! – No CSV files were written.'

# Receives an opened session, drives the selection and returns session.export()
Selector = Callable[[ExportSession], Optional[ExportOutcome]]


def fixed_selection(indices: Iterable[int]) -> Selector:
    """Selector that includes the given table indices and exports right away."""
    def select(session: ExportSession) -> ExportOutcome:
        for index in indices:
            session.toggle(index, True)
        return session.export()
    return select


def select_all(session: ExportSession) -> ExportOutcome:
    """Selector that includes every table."""
    for index in range(len(session.tables)):
        session.toggle(index, True)
    return session.export()


class TableExportPlugin:
    """Exports tables of the active view to CSV files."""

    def __init__(self, settings_store: SettingsStore, storage, clipboard=None,
                 notify: Optional[Callable[[str], None]] = None,
                 selection_surface: Optional[Selector] = None):
        self.settings_store = settings_store
        self.storage = storage
        self.clipboard = clipboard
        self.notify = notify
        # Opened for the user when the command is invoked without a selector
        self.selection_surface = selection_surface
        self.settings = PluginSettings()

    def load(self) -> None:
        from . import __version__

        self.load_settings()
        logger.info(f"Table to CSV plugin: Version {__version__} loaded.")

    def load_settings(self) -> PluginSettings:
        self.settings = self.settings_store.load()
        return self.settings

    def save_settings(self, settings: Optional[PluginSettings] = None) -> None:
        self.settings_store.save(settings or self.settings)

    def change_setting(self, key: str, value: Any) -> PluginSettings:
        """Apply one settings change and save it immediately."""
        update_setting(self.settings, key, value)
        self.save_settings()
        return self.settings

    def check_callback(self, view: Optional[TableSource], checking: bool,
                       selector: Optional[Selector] = None) -> bool:
        """
        Report whether the export command is available, and run it when not checking.

        Args:
            view: The active document view, or None
            checking: Only answer availability, without side effects
            selector: Drives the selection once a session is open, defaults to
                the configured selection surface

        Returns:
            True when a view is active, False otherwise
        """
        if view is None:
            return False

        if not checking:
            selector = selector or self.selection_surface
            if selector is None:
                raise ValueError("No selection surface configured for the export command")
            self.run_export(view, selector)

        return True

    def run_export(self, view: TableSource, selector: Selector,
                   overrides: Optional[Dict[str, Any]] = None) -> Optional[ExportOutcome]:
        """Check the view, open a session and hand it to ``selector``.

        ``overrides`` change settings for this export only; just the advanced
        file number is written back to the stored settings.
        """
        if not view.is_reading_mode():
            present_error(PreconditionError(READING_MODE_REQUIRED), self.notify)
            return None

        session_settings = self.settings
        if overrides:
            session_settings = replace(self.settings)
            for key, value in overrides.items():
                update_setting(session_settings, key, value)

        def persist(updated: PluginSettings) -> None:
            self.settings.file_number = updated.file_number
            self.save_settings()

        session = ExportSession(
            tables=view.list_tables(),
            settings=session_settings,
            storage=self.storage,
            clipboard=self.clipboard,
            notify=self.notify,
            save_settings=persist
        )

        if not session.open():
            return None

        return selector(session)
