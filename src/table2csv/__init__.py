"""
table2csv - Export tables of rendered documents to CSV files.
"""

__version__ = "1.2.0"

from .converter import ConversionConfig, QuoteStyle, LineBreakPolicy, convert
from .tables import Table, TableSource, HtmlTableSource, open_view
from .selection import SelectionState
from .settings import PluginSettings, SettingsStore
from .coordinator import ExportSession, ExportOutcome, SessionState
from .plugin import TableExportPlugin

__all__ = [
    "ConversionConfig", "QuoteStyle", "LineBreakPolicy", "convert",
    "Table", "TableSource", "HtmlTableSource", "open_view",
    "SelectionState", "PluginSettings", "SettingsStore",
    "ExportSession", "ExportOutcome", "SessionState", "TableExportPlugin"
]
