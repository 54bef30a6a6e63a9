"""
Persisted exporter settings and the rotating file number.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .converter import SEPARATORS, LineBreakPolicy, QuoteStyle
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

COUNTER_MIN = 1
COUNTER_MAX = 999
COUNTER_WIDTH = 3


@dataclass
class PluginSettings:
    """Everything the exporter remembers between runs."""
    # Not used for writing yet, files always go to the storage root
    export_path: str = './'
    base_filename: str = 'table-export'
    file_number: str = '001'
    sep_char: str = 'sepChar-semicolon'
    quote_data_char: str = QuoteStyle.NONE.value
    save_to_clipboard_too: bool = False
    remove_crlf: str = LineBreakPolicy.SPACE.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PluginSettings':
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        if 'save_to_clipboard_too' in values:
            values['save_to_clipboard_too'] = _coerce_bool(values['save_to_clipboard_too'])
        return cls(**values)


DEFAULT_SETTINGS: Dict[str, Any] = PluginSettings().to_dict()


def load_config(defaults: Dict[str, Any], stored: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge stored settings over defaults.

    Keys missing from ``stored`` fall back to their default. Unknown keys are
    kept so a file written by a newer version survives a round trip.
    """
    merged = dict(defaults)
    if stored:
        merged.update(stored)
    return merged


def parse_counter(text: Any) -> int:
    """Read a stored file number.

    Non numeric values and values outside 1..999 restart at 1.
    """
    try:
        value = int(str(text).strip())
    except ValueError:
        logger.warning(f"File number {text!r} is not numeric, restarting at {render_counter(COUNTER_MIN)}")
        return COUNTER_MIN

    if not COUNTER_MIN <= value <= COUNTER_MAX:
        logger.warning(f"File number {text!r} is outside {COUNTER_MIN}..{COUNTER_MAX}, "
                       f"restarting at {render_counter(COUNTER_MIN)}")
        return COUNTER_MIN
    return value


def render_counter(value: int) -> str:
    """Zero pad a file number to at least three digits."""
    return f"{value:0{COUNTER_WIDTH}d}"


def advance_counter(text: Any) -> str:
    """Return the file number that follows ``text``, wrapping 999 back to 001."""
    value = parse_counter(text) + 1
    if value > COUNTER_MAX:
        value = COUNTER_MIN
    return render_counter(value)


def output_filename(settings: PluginSettings) -> str:
    """Name of the next export file."""
    return f"{settings.base_filename}-{render_counter(parse_counter(settings.file_number))}.csv"


_TRUE_VALUES = {'true', 'yes', 'on', '1'}
_FALSE_VALUES = {'false', 'no', 'off', '0'}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Expected a boolean, got {value!r}", context={'value': value})


def update_setting(settings: PluginSettings, key: str, value: Any) -> PluginSettings:
    """Validate and apply one settings change in place."""
    known = {f.name for f in fields(PluginSettings)}
    if key not in known:
        raise ConfigurationError(f"Unknown setting '{key}'", context={'key': key})

    if key == 'sep_char' and value not in SEPARATORS:
        raise ConfigurationError(
            f"Unknown separator option '{value}' (expected one of: {', '.join(SEPARATORS)})",
            context={'key': key, 'value': value}
        )
    if key == 'quote_data_char' and value not in {style.value for style in QuoteStyle}:
        raise ConfigurationError(f"Unknown quote option '{value}'", context={'key': key, 'value': value})
    if key == 'remove_crlf' and value not in {policy.value for policy in LineBreakPolicy}:
        raise ConfigurationError(f"Unknown line break option '{value}'", context={'key': key, 'value': value})
    if key == 'file_number':
        text = str(value).strip()
        if not text.isdigit() or not COUNTER_MIN <= int(text) <= COUNTER_MAX:
            raise ConfigurationError(
                f"File number must be a number from {COUNTER_MIN} to {COUNTER_MAX}, got {value!r}",
                context={'key': key, 'value': value}
            )
    if key == 'save_to_clipboard_too':
        value = _coerce_bool(value)

    setattr(settings, key, value)
    logger.debug(f"Setting {key} changed to {value!r}")
    return settings


class SettingsStore:
    """YAML or JSON file holding the settings, chosen by file suffix."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.extra: Dict[str, Any] = {}

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in ['.yaml', '.yml']

    def load(self) -> PluginSettings:
        """Load settings merged over defaults. A missing file gives the defaults."""
        stored: Dict[str, Any] = {}

        if self.path.exists():
            with open(self.path, 'r', encoding='utf-8') as f:
                if self.is_yaml:
                    stored = yaml.safe_load(f) or {}
                else:
                    text = f.read()
                    stored = json.loads(text) if text.strip() else {}
            logger.info(f"Loaded settings from {self.path}")
        else:
            logger.info(f"No settings file at {self.path}, using defaults")

        if not isinstance(stored, dict):
            raise ConfigurationError(f"Settings file {self.path} does not contain a mapping",
                                     context={'path': self.path})

        merged = load_config(DEFAULT_SETTINGS, stored)
        known = set(DEFAULT_SETTINGS)
        self.extra = {key: value for key, value in merged.items() if key not in known}
        return PluginSettings.from_dict(merged)

    def save(self, settings: PluginSettings) -> None:
        """Write the settings file, keeping keys this version does not know."""
        data = dict(self.extra)
        data.update(settings.to_dict())

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            if self.is_yaml:
                yaml.dump(data, f, default_flow_style=False, indent=2)
            else:
                json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved settings to {self.path}")
