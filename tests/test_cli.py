"""
Tests for the command-line interface.
"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from table2csv.cli import SelectionPrompt, create_parser, main
from table2csv.coordinator import ExportSession
from table2csv.settings import PluginSettings
from table2csv.sinks import SinkResult
from table2csv.tables import Table


HTML = """
<table><tr><td>a</td><td>b</td></tr></table>
<table><tr><td>c</td></tr></table>
"""


class FakeStorage:
    def __init__(self):
        self.files = {}

    def create(self, name, content):
        self.files[name] = content
        return SinkResult.ok()


class TestParser(unittest.TestCase):
    """Test cases for argument parsing."""

    def test_export_arguments(self):
        args = create_parser().parse_args(["export", "doc.html", "--tables", "1,3", "--separator", "sepChar-tab"])
        self.assertEqual(args.command, "export")
        self.assertEqual(args.tables, "1,3")
        self.assertEqual(args.separator, "sepChar-tab")
        self.assertIsNone(args.clipboard)

    def test_clipboard_flags(self):
        parser = create_parser()
        self.assertTrue(parser.parse_args(["export", "d.html", "--clipboard"]).clipboard)
        self.assertFalse(parser.parse_args(["export", "d.html", "--no-clipboard"]).clipboard)

    def test_invalid_separator(self):
        with self.assertRaises(SystemExit):
            create_parser().parse_args(["export", "doc.html", "--separator", "space"])


class TestSelectionPrompt(unittest.TestCase):
    """Test cases for the interactive selection surface."""

    def make_session(self):
        storage = FakeStorage()
        session = ExportSession(
            tables=[Table(rows=[["A"]]), Table(rows=[["B"]]), Table(rows=[["C"]])],
            settings=PluginSettings(),
            storage=storage
        )
        session.open()
        return session, storage

    def test_toggle_and_export(self):
        session, storage = self.make_session()
        answers = iter(["3,1", "e"])
        prompt = SelectionPrompt(input_func=lambda _: next(answers), output=lambda _: None)

        outcome = prompt(session)

        self.assertEqual(outcome.body, "A\n\nC")
        self.assertEqual(storage.files, {"table-export-001.csv": "A\n\nC"})

    def test_toggle_off_again(self):
        session, storage = self.make_session()
        answers = iter(["1,2", "1", "e"])
        prompt = SelectionPrompt(input_func=lambda _: next(answers), output=lambda _: None)

        outcome = prompt(session)

        self.assertEqual(outcome.body, "B")

    def test_invalid_input_reprompts(self):
        session, storage = self.make_session()
        answers = iter(["9", "x", "2", "e"])
        output = []
        prompt = SelectionPrompt(input_func=lambda _: next(answers), output=output.append)

        outcome = prompt(session)

        self.assertEqual(outcome.body, "B")
        self.assertEqual(sum(1 for line in output if line.startswith("Invalid selection")), 2)

    def test_cancel(self):
        session, storage = self.make_session()
        prompt = SelectionPrompt(input_func=lambda _: "q", output=lambda _: None)

        self.assertIsNone(prompt(session))
        self.assertEqual(storage.files, {})


class TestMain(unittest.TestCase):
    """End-to-end runs of main()."""

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp_dir.name)
        self.document = self.dir / "notes.html"
        self.document.write_text(HTML, encoding="utf-8")
        self.config = self.dir / "settings.yaml"
        self.vault = self.dir / "vault"

    def tearDown(self):
        self.tmp_dir.cleanup()

    def run_main(self, *argv):
        with patch("table2csv.cli.setup_logging"):
            return main(["--config", str(self.config), *argv])

    def test_export_all(self):
        code = self.run_main("export", str(self.document), "--all", "--vault", str(self.vault))

        self.assertEqual(code, 0)
        self.assertEqual((self.vault / "table-export-001.csv").read_text(encoding="utf-8"), "a;b\n\nc")
        with open(self.config, "r", encoding="utf-8") as f:
            self.assertEqual(yaml.safe_load(f)["file_number"], "002")

    def test_export_selected_with_separator(self):
        code = self.run_main("export", str(self.document), "--tables", "1",
                             "--separator", "sepChar-pipe", "--vault", str(self.vault))

        self.assertEqual(code, 0)
        self.assertEqual((self.vault / "table-export-001.csv").read_text(encoding="utf-8"), "a|b")

    def test_export_with_clipboard(self):
        with patch("table2csv.sinks.pyperclip.copy") as mock_copy:
            code = self.run_main("export", str(self.document), "--tables", "2",
                                 "--clipboard", "--vault", str(self.vault))

        self.assertEqual(code, 0)
        mock_copy.assert_called_once_with("c")

    def test_export_without_tables_prompts(self):
        answers = iter(["2", "e"])
        with patch("builtins.input", lambda _: next(answers)), patch("builtins.print"):
            code = self.run_main("export", str(self.document), "--vault", str(self.vault))

        self.assertEqual(code, 0)
        self.assertEqual((self.vault / "table-export-001.csv").read_text(encoding="utf-8"), "c")

    def test_markdown_refused(self):
        source = self.dir / "notes.md"
        source.write_text("| a |\n", encoding="utf-8")

        code = self.run_main("export", str(source), "--all", "--vault", str(self.vault))

        self.assertEqual(code, 1)
        self.assertFalse(self.vault.exists())

    def test_table_out_of_range(self):
        code = self.run_main("export", str(self.document), "--tables", "5", "--vault", str(self.vault))
        self.assertEqual(code, 1)

    def test_missing_document(self):
        code = self.run_main("export", str(self.dir / "missing.html"), "--all")
        self.assertEqual(code, 1)

    def test_settings_set_and_show(self):
        self.assertEqual(self.run_main("settings", "set", "base_filename", "report"), 0)
        with open(self.config, "r", encoding="utf-8") as f:
            self.assertEqual(yaml.safe_load(f)["base_filename"], "report")
        self.assertEqual(self.run_main("settings", "show"), 0)

    def test_settings_set_invalid(self):
        self.assertEqual(self.run_main("settings", "set", "sep_char", "nonsense"), 1)

    def test_list(self):
        self.assertEqual(self.run_main("list", str(self.document)), 0)

    def test_no_command(self):
        self.assertEqual(main([]), 1)


if __name__ == "__main__":
    unittest.main()
