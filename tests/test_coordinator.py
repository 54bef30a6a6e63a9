"""
Test suite for export session coordination.
"""

import pytest
from unittest.mock import Mock

from table2csv.coordinator import (
    CLIPBOARD_FAILED,
    NO_DATA_TO_EXPORT,
    NO_TABLE_FOUND,
    NO_TABLES_SELECTED,
    ExportSession,
    SessionState,
)
from table2csv.errors import (
    EmptyResultError,
    EmptySelectionError,
    SelectionClosedError,
    StorageWriteError,
)
from table2csv.settings import PluginSettings
from table2csv.sinks import SinkResult
from table2csv.tables import Table


class FakeStorage:
    """Records created files; can be told to fail."""

    def __init__(self, error=None):
        self.error = error
        self.files = {}

    def create(self, name, content):
        if self.error:
            return SinkResult.failed(self.error)
        self.files[name] = content
        return SinkResult.ok()


class FakeClipboard:
    def __init__(self, error=None):
        self.error = error
        self.text = None

    def write_text(self, text):
        if self.error:
            return SinkResult.failed(self.error)
        self.text = text
        return SinkResult.ok()


class TestSessionBase:
    """Shared fixtures for session tests."""

    @pytest.fixture
    def tables(self):
        return [
            Table(rows=[["A"]]),
            Table(rows=[["x", "y"], ["1", "2"]]),
            Table(rows=[["B"]]),
        ]

    @pytest.fixture
    def settings(self):
        return PluginSettings()

    @pytest.fixture
    def storage(self):
        return FakeStorage()

    @pytest.fixture
    def notices(self):
        return []

    @pytest.fixture
    def save_settings(self):
        return Mock()

    @pytest.fixture
    def make_session(self, tables, settings, storage, notices, save_settings):
        def make(table_list=None, clipboard=None):
            return ExportSession(
                tables=tables if table_list is None else table_list,
                settings=settings,
                storage=storage,
                clipboard=clipboard,
                notify=notices.append,
                save_settings=save_settings
            )
        return make


class TestSessionOpen(TestSessionBase):
    """Opening a session."""

    def test_no_tables_found(self, make_session, notices, storage):
        session = make_session(table_list=[])

        assert session.open() is False
        assert session.state is SessionState.TERMINAL
        assert notices == [NO_TABLE_FOUND]
        assert storage.files == {}

    def test_presents_tables(self, make_session, notices):
        session = make_session()

        assert session.open() is True
        assert session.state is SessionState.PRESENTING
        assert session.selection.selected == frozenset()
        assert notices == []

    def test_open_twice(self, make_session):
        session = make_session()
        session.open()
        with pytest.raises(SelectionClosedError):
            session.open()

    def test_toggle_before_open(self, make_session):
        with pytest.raises(SelectionClosedError):
            make_session().toggle(0, True)


class TestSessionExport(TestSessionBase):
    """Exporting selected tables."""

    def test_export_in_ascending_index_order(self, make_session, storage, settings, notices):
        session = make_session()
        session.open()
        session.toggle(2, True)
        session.toggle(0, True)

        outcome = session.export()

        assert outcome.success
        assert outcome.selected_indices == [0, 2]
        assert outcome.body == "A\n\nB"
        assert storage.files == {"table-export-001.csv": "A\n\nB"}
        assert outcome.filename == "table-export-001.csv"
        assert settings.file_number == "002"
        assert session.state is SessionState.TERMINAL
        assert outcome.state is SessionState.TERMINAL
        assert notices == ["The file table-export-001.csv was successfully created in your vault."]

    def test_uses_conversion_settings(self, make_session, storage, settings):
        settings.sep_char = "sepChar-comma"
        settings.quote_data_char = "quoteChar-doubleQuotes"
        session = make_session()
        session.open()
        session.toggle(1, True)

        outcome = session.export()

        assert outcome.body == '"x","y"\n"1","2"'

    def test_settings_saved_after_success(self, make_session, save_settings, settings):
        session = make_session()
        session.open()
        session.toggle(0, True)
        session.export()

        save_settings.assert_called_once_with(settings)

    def test_unchecked_table_not_exported(self, make_session, storage):
        session = make_session()
        session.open()
        session.toggle(0, True)
        session.toggle(2, True)
        session.toggle(0, False)

        outcome = session.export()

        assert outcome.body == "B"

    def test_empty_selection(self, make_session, storage, settings, notices, save_settings):
        session = make_session()
        session.open()

        outcome = session.export()

        assert not outcome.success
        assert isinstance(outcome.error, EmptySelectionError)
        assert notices == [NO_TABLES_SELECTED]
        assert storage.files == {}
        assert settings.file_number == "001"
        assert session.state is SessionState.TERMINAL
        save_settings.assert_not_called()

    def test_empty_result(self, make_session, storage, settings, notices):
        session = make_session(table_list=[Table(), Table()])
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert isinstance(outcome.error, EmptyResultError)
        assert notices == [NO_DATA_TO_EXPORT]
        assert storage.files == {}
        assert settings.file_number == "001"

    def test_two_empty_tables_still_export_separator(self, make_session, storage):
        session = make_session(table_list=[Table(), Table()])
        session.open()
        session.toggle(0, True)
        session.toggle(1, True)

        outcome = session.export()

        assert outcome.success
        assert outcome.body == "\n\n"

    def test_storage_failure(self, make_session, settings, notices, save_settings):
        session = make_session()
        session.storage = FakeStorage(error="File already exists.")
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert not outcome.success
        assert isinstance(outcome.error, StorageWriteError)
        assert notices == ["Error: File already exists."]
        assert settings.file_number == "001"
        save_settings.assert_not_called()

    def test_counter_wraps(self, make_session, settings, storage):
        settings.file_number = "999"
        session = make_session()
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert outcome.filename == "table-export-999.csv"
        assert settings.file_number == "001"

    def test_export_twice(self, make_session):
        session = make_session()
        session.open()
        session.toggle(0, True)
        session.export()
        with pytest.raises(SelectionClosedError):
            session.export()

    def test_cancel(self, make_session, storage):
        session = make_session()
        session.open()
        session.cancel()

        assert session.state is SessionState.TERMINAL
        assert storage.files == {}

    def test_save_failure_does_not_fail_export(self, make_session, save_settings, storage):
        save_settings.side_effect = OSError("read-only")
        session = make_session()
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert outcome.success
        assert "table-export-001.csv" in storage.files


class TestSessionClipboard(TestSessionBase):
    """Copying the export to the clipboard."""

    def test_copy_success(self, make_session, settings, notices):
        settings.save_to_clipboard_too = True
        clipboard = FakeClipboard()
        session = make_session(clipboard=clipboard)
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert outcome.copied_to_clipboard
        assert clipboard.text == "A"
        assert notices == [
            "The file table-export-001.csv was successfully created in your vault. "
            "The contents was also copied to the clipboard."
        ]

    def test_copy_failure_keeps_file_and_counter(self, make_session, settings, notices, storage):
        settings.save_to_clipboard_too = True
        session = make_session(clipboard=FakeClipboard(error="no clipboard"))
        session.open()
        session.toggle(0, True)

        outcome = session.export()

        assert outcome.success
        assert not outcome.copied_to_clipboard
        assert outcome.clipboard_error is not None
        assert notices == [CLIPBOARD_FAILED]
        assert "table-export-001.csv" in storage.files
        assert settings.file_number == "002"

    def test_clipboard_not_used_when_disabled(self, make_session):
        clipboard = FakeClipboard()
        session = make_session(clipboard=clipboard)
        session.open()
        session.toggle(0, True)

        session.export()

        assert clipboard.text is None

    def test_outcome_to_dict(self, make_session):
        session = make_session()
        session.open()
        session.toggle(0, True)

        data = session.export().to_dict()

        assert data['success'] is True
        assert data['state'] == 'terminal'
        assert data['filename'] == 'table-export-001.csv'
        assert data['error'] is None
