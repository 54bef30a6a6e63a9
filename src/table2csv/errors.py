"""
Error taxonomy for table export operations.
"""

from typing import Any, Dict, Mapping, Optional


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class TableExportError(Exception):
    """Base error for everything the exporter reports to the user."""

    def __init__(self, message: str, context: Optional[Mapping[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.error_type, 'message': str(self), 'context': self.context}


class ConfigurationError(TableExportError, ValueError):
    """Unknown option id or invalid settings value."""


class PreconditionError(TableExportError):
    """No active view, wrong view mode, or no tables in the document."""


class EmptySelectionError(TableExportError):
    """Export was confirmed with no table selected."""


class EmptyResultError(TableExportError):
    """The selected tables converted to an empty string."""


class StorageWriteError(TableExportError):
    """Creating the output file failed."""


class ClipboardWriteError(TableExportError):
    """Copying the export to the clipboard failed."""


class SelectionClosedError(TableExportError):
    """A selection was used after it had already been confirmed."""
