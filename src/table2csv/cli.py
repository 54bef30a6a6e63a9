"""
Command-line interface for the table to CSV exporter.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .converter import SEPARATOR_LABELS, LineBreakPolicy, QuoteStyle
from .coordinator import ExportOutcome, ExportSession
from .errors import TableExportError
from .plugin import COMMAND_NAME, TableExportPlugin, fixed_selection, select_all
from .settings import DEFAULT_SETTINGS, SettingsStore
from .sinks import SystemClipboard, VaultStorage
from .tables import open_view, preview
from .utils import parse_index_list, setup_logging

DEFAULT_CONFIG = "table2csv.yaml"


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="table2csv",
        description="Export tables of rendered documents to CSV files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pick tables interactively and export them into the current folder
  table2csv export notes.html

  # Export the first and third table into a vault folder
  table2csv export notes.html --tables 1,3 --vault ~/vault

  # Export every table, comma separated and double quoted, and copy to the clipboard
  table2csv export notes.html --all --separator sepChar-comma --quote quoteChar-doubleQuotes --clipboard

  # Show table previews
  table2csv list notes.html

  # Change a stored setting
  table2csv settings set base_filename report
        """
    )

    parser.add_argument(
        "-c", "--config",
        help=f"Path to settings file (YAML or JSON, default: {DEFAULT_CONFIG})",
        default=DEFAULT_CONFIG
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--log-file",
        help="Log file path"
    )

    subparsers = parser.add_subparsers(dest="command")

    export_parser = subparsers.add_parser("export", help=COMMAND_NAME)
    export_parser.add_argument("document", help="Rendered HTML document (or markdown source)")
    export_parser.add_argument(
        "--tables",
        help="Comma separated table numbers to export (1-based); skips the selection prompt"
    )
    export_parser.add_argument(
        "--all",
        action="store_true",
        help="Export every table without prompting"
    )
    export_parser.add_argument(
        "--vault",
        help="Folder the CSV file is created in (default: current directory)",
        default="."
    )
    export_parser.add_argument(
        "--separator",
        choices=list(SEPARATOR_LABELS),
        help="Separator for this export only"
    )
    export_parser.add_argument(
        "--quote",
        choices=[style.value for style in QuoteStyle],
        help="Quote style for this export only"
    )
    export_parser.add_argument(
        "--line-breaks",
        choices=[policy.value for policy in LineBreakPolicy],
        help="Line break handling for this export only"
    )
    clipboard_group = export_parser.add_mutually_exclusive_group()
    clipboard_group.add_argument(
        "--clipboard",
        dest="clipboard",
        action="store_const",
        const=True,
        help="Copy the export to the clipboard, too"
    )
    clipboard_group.add_argument(
        "--no-clipboard",
        dest="clipboard",
        action="store_const",
        const=False,
        help="Do not copy the export to the clipboard"
    )

    list_parser = subparsers.add_parser("list", help="Show previews of the tables in a document")
    list_parser.add_argument("document", help="Rendered HTML document")
    list_parser.add_argument("--rows", type=int, default=5, help="Rows per preview (default: 5)")

    settings_parser = subparsers.add_parser("settings", help="Show or change stored settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Print the current settings")
    set_parser = settings_sub.add_parser("set", help="Change one setting")
    set_parser.add_argument("key", choices=list(DEFAULT_SETTINGS))
    set_parser.add_argument("value")

    return parser


def print_notice(message: str) -> None:
    print(message)


class SelectionPrompt:
    """Interactive selection surface: previews and a toggle prompt."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None,
                 output: Optional[Callable[[str], None]] = None):
        self.input = input_func or input
        self.output = output or print

    def __call__(self, session: ExportSession) -> Optional[ExportOutcome]:
        self.output("Select tables to export")
        self.output("=" * 23)
        self._show(session)

        while True:
            answer = self.input("\nTable numbers to toggle, 'e' to export, 'q' to cancel: ").strip().lower()

            if answer == 'e':
                return session.export()
            if answer == 'q':
                session.cancel()
                return None
            if not answer:
                continue

            try:
                indices = parse_index_list(answer)
                for index in indices:
                    session.toggle(index, not session.selection.is_selected(index))
            except (ValueError, IndexError) as e:
                self.output(f"Invalid selection: {e}")
                continue

            self._show_marks(session)

    def _show(self, session: ExportSession) -> None:
        for index, table in enumerate(session.tables):
            caption = f" - {table.caption}" if table.caption else ""
            self.output(f"\n[ ] Table {index + 1}{caption}")
            self.output(preview(table))

    def _show_marks(self, session: ExportSession) -> None:
        marks = []
        for index in range(len(session.tables)):
            mark = 'x' if session.selection.is_selected(index) else ' '
            marks.append(f"[{mark}] Table {index + 1}")
        self.output("  ".join(marks))


def run_export(args, plugin: TableExportPlugin, logger: logging.Logger) -> int:
    view = open_view(args.document)

    overrides: Dict[str, object] = {}
    if args.separator:
        overrides['sep_char'] = args.separator
    if args.quote:
        overrides['quote_data_char'] = args.quote
    if args.line_breaks:
        overrides['remove_crlf'] = args.line_breaks
    if args.clipboard is not None:
        overrides['save_to_clipboard_too'] = args.clipboard

    if args.all:
        selector = select_all
    elif args.tables:
        selector = fixed_selection(parse_index_list(args.tables))
    else:
        selector = plugin.selection_surface

    outcome = plugin.run_export(view, selector, overrides=overrides)

    if outcome is None:
        return 1

    logger.debug(f"Export outcome: {outcome.to_dict()}")
    return 0 if outcome.success and outcome.clipboard_error is None else 1


def run_list(args) -> int:
    view = open_view(args.document)

    if not view.is_reading_mode():
        print(f"{args.document} is not a rendered document; no tables to list.")
        return 1

    tables = view.list_tables()
    if not tables:
        print("No table was found.")
        return 1

    for index, table in enumerate(tables):
        caption = f" - {table.caption}" if table.caption else ""
        print(f"\nTable {index + 1}{caption} ({len(table)} rows, {table.column_count} columns)")
        print(preview(table, max_rows=args.rows))
    return 0


def run_settings(args, plugin: TableExportPlugin) -> int:
    if args.settings_command == "set":
        plugin.change_setting(args.key, args.value)
        print(f"{args.key} = {getattr(plugin.settings, args.key)!r}")
        return 0

    for key, value in plugin.settings.to_dict().items():
        print(f"{key}: {value!r}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    log_level = "DEBUG" if args.verbose else "WARNING"
    setup_logging(log_level, args.log_file)

    logger = logging.getLogger(__name__)

    try:
        plugin = TableExportPlugin(
            settings_store=SettingsStore(Path(args.config)),
            storage=VaultStorage(Path(getattr(args, 'vault', '.')).expanduser()),
            clipboard=SystemClipboard(),
            notify=print_notice,
            selection_surface=SelectionPrompt()
        )
        plugin.load()

        if args.command == "export":
            return run_export(args, plugin, logger)
        if args.command == "list":
            return run_list(args)
        if args.command == "settings":
            return run_settings(args, plugin)

        parser.print_help()
        return 1

    except (TableExportError, FileNotFoundError, ValueError, IndexError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
