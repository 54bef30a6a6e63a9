"""
Table to delimited text conversion.

Turns one table (rows of cell strings) into a CSV-like string using a
fixed set of separators, quote styles and line break policies.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Option ids are the values persisted in the settings file
SEPARATORS: Dict[str, str] = {
    'sepChar-semicolon': ';',
    'sepChar-comma': ',',
    'sepChar-tab': '\t',
    'sepChar-pipe': '|',
    'sepChar-tilde': '~',
    'sepChar-caret': '^',
    'sepChar-colon': ':',
}

SEPARATOR_LABELS: Dict[str, str] = {
    'sepChar-semicolon': '; (semicolon)',
    'sepChar-comma': ', (comma)',
    'sepChar-tab': '\\t (tab)',
    'sepChar-pipe': '| (pipe)',
    'sepChar-tilde': '~ (tilde)',
    'sepChar-caret': '^ (caret)',
    'sepChar-colon': ': (colon)',
}

DEFAULT_SEPARATOR = 'sepChar-semicolon'

LINE_BREAK_TOKEN = '[CR]'

TABLE_SEPARATOR = '\n\n'

_LINE_BREAK_RE = re.compile(r'\r\n|\n|\r')


class QuoteStyle(Enum):
    """Character wrapped around every cell."""
    NONE = "quoteChar-noQuote"
    DOUBLE = "quoteChar-doubleQuotes"
    SINGLE = "quoteChar-singleQuotes"

    @property
    def char(self) -> str:
        return {'quoteChar-noQuote': '', 'quoteChar-doubleQuotes': '"',
                'quoteChar-singleQuotes': "'"}[self.value]

    @property
    def label(self) -> str:
        return {
            'quoteChar-noQuote': "Don't quote data",
            'quoteChar-doubleQuotes': 'Quote data with double quote character (")',
            'quoteChar-singleQuotes': "Quote data with single quote character (')",
        }[self.value]


class LineBreakPolicy(Enum):
    """What happens to CR/LF sequences inside a cell."""
    STRIP = "removeCRLF-clear"
    SPACE = "removeCRLF-space"
    TOKEN = "removeCRLF-string1"

    @property
    def replacement(self) -> str:
        return {'removeCRLF-clear': '', 'removeCRLF-space': ' ',
                'removeCRLF-string1': LINE_BREAK_TOKEN}[self.value]

    @property
    def label(self) -> str:
        return {
            'removeCRLF-clear': 'Remove all CR & LF characters',
            'removeCRLF-space': 'Replace all CR & LF characters with one space',
            'removeCRLF-string1': f'Replace all CR & LF characters with string {LINE_BREAK_TOKEN}',
        }[self.value]


def _lookup_enum(enum_cls, option_id: Any, setting_name: str):
    if isinstance(option_id, enum_cls):
        return option_id
    try:
        return enum_cls(option_id)
    except ValueError:
        choices = ', '.join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Unknown {setting_name} option '{option_id}' (expected one of: {choices})",
            context={'setting': setting_name, 'value': option_id}
        )


def resolve_separator(option_id: str) -> str:
    """Map a separator option id to its character."""
    if option_id not in SEPARATORS:
        raise ConfigurationError(
            f"Unknown separator option '{option_id}' (expected one of: {', '.join(SEPARATORS)})",
            context={'setting': 'sep_char', 'value': option_id}
        )
    return SEPARATORS[option_id]


@dataclass(frozen=True)
class ConversionConfig:
    """Immutable conversion settings."""
    separator: str = ';'
    quote_style: QuoteStyle = QuoteStyle.NONE
    line_break_policy: LineBreakPolicy = LineBreakPolicy.SPACE

    def __post_init__(self):
        if self.separator not in SEPARATORS.values():
            raise ConfigurationError(
                f"Separator {self.separator!r} is not one of the supported separators",
                context={'separator': self.separator}
            )
        # Accept option ids as well as enum members
        object.__setattr__(self, 'quote_style',
                           _lookup_enum(QuoteStyle, self.quote_style, 'quote_data_char'))
        object.__setattr__(self, 'line_break_policy',
                           _lookup_enum(LineBreakPolicy, self.line_break_policy, 'remove_crlf'))

    @classmethod
    def from_options(cls, sep_char: str = DEFAULT_SEPARATOR,
                     quote_data_char: str = QuoteStyle.NONE.value,
                     remove_crlf: str = LineBreakPolicy.SPACE.value) -> 'ConversionConfig':
        """Build a config from persisted option ids."""
        return cls(
            separator=resolve_separator(sep_char),
            quote_style=_lookup_enum(QuoteStyle, quote_data_char, 'quote_data_char'),
            line_break_policy=_lookup_enum(LineBreakPolicy, remove_crlf, 'remove_crlf'),
        )

    @classmethod
    def from_settings(cls, settings) -> 'ConversionConfig':
        """Build a config from a PluginSettings instance."""
        return cls.from_options(settings.sep_char, settings.quote_data_char, settings.remove_crlf)


def normalize_line_breaks(text: str, policy: LineBreakPolicy) -> str:
    """Replace every CRLF, lone LF and lone CR in ``text`` according to ``policy``.

    Each occurrence is replaced on its own, so ``"a\\n\\nb"`` with the space
    policy becomes ``"a  b"``.
    """
    return _LINE_BREAK_RE.sub(policy.replacement, text)


def quote_cell(text: str, style: QuoteStyle) -> str:
    """Wrap ``text`` in the quote character. Embedded quotes are left alone."""
    quote = style.char
    return f"{quote}{text}{quote}"


def convert_row(cells: Sequence[str], config: ConversionConfig) -> str:
    """Convert one row of cells to a delimited line."""
    processed = []
    for cell in cells:
        text = normalize_line_breaks(cell or "", config.line_break_policy)
        processed.append(quote_cell(text, config.quote_style))
    return config.separator.join(processed)


def convert(table: Optional[Iterable[Sequence[str]]], config: ConversionConfig) -> str:
    """
    Convert a table to delimited text.

    Args:
        table: Ordered rows of ordered cell strings. Rows may differ in length.
        config: Separator, quoting and line break settings

    Returns:
        One line per row joined with ``\\n``, no trailing newline. An empty
        or missing table gives an empty string.
    """
    if table is None:
        return ""

    lines: List[str] = [convert_row(row, config) for row in table]
    logger.debug(f"Converted table with {len(lines)} rows")

    if not lines:
        return ""
    return "\n".join(lines)


def join_tables(texts: Iterable[str]) -> str:
    """Join per-table outputs with one blank line between them."""
    return TABLE_SEPARATOR.join(texts)
