"""
Scheduler settings: defaults merged with settings.yaml from the data directory.
"""
import os
from datetime import date

import yaml

from .errors import ValidationError
from .slots import parse_start, validate_slot_settings

SETTINGS_FILENAME = 'settings.yaml'
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def get_data_dir() -> str:
    return os.environ.get('CHAMPIONSHIP_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def get_default_settings():
    """Return default settings."""
    return {
        'start_time': '10:00',
        'match_interval_minutes': 30,
        'matches_per_day': 8,
        'double_round_robin': False,
    }


def load_settings(data_dir=None):
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = os.path.join(data_dir or get_data_dir(), SETTINGS_FILENAME)
    if not os.path.exists(path):
        return defaults
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
        if not data:
            return defaults
        return {**defaults, **data}


def save_settings(settings, data_dir=None):
    """Save settings to YAML file."""
    data_dir = data_dir or get_data_dir()
    os.makedirs(data_dir, exist_ok=True)
    with open(os.path.join(data_dir, SETTINGS_FILENAME), 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)


def _as_int(data, key):
    value = data.get(key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer, got {value!r}")


def _as_bool(data, key):
    value = data.get(key, False)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'yes', 'on', '1'):
        return True
    if isinstance(value, str) and value.strip().lower() in ('false', 'no', 'off', '0', ''):
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValidationError(f"{key} must be true or false, got {value!r}")


class ScheduleConfig:
    """Validated options for one group scheduling run."""

    def __init__(self, start, match_interval_minutes, matches_per_day, double_round_robin=False):
        validate_slot_settings(matches_per_day, match_interval_minutes)
        self.start = start
        self.match_interval_minutes = match_interval_minutes
        self.matches_per_day = matches_per_day
        self.double_round_robin = double_round_robin

    @classmethod
    def from_dict(cls, data, defaults=None):
        """Build from request values layered over settings.

        ``start_date`` falls back to today.
        """
        merged = {**(defaults or get_default_settings()), **{k: v for k, v in data.items() if v is not None}}
        start_date = merged.get('start_date') or date.today().isoformat()
        return cls(
            start=parse_start(start_date, merged.get('start_time')),
            match_interval_minutes=_as_int(merged, 'match_interval_minutes'),
            matches_per_day=_as_int(merged, 'matches_per_day'),
            double_round_robin=_as_bool(merged, 'double_round_robin'),
        )

    def __repr__(self):
        return (f"ScheduleConfig(start={self.start.isoformat()}, interval={self.match_interval_minutes}, "
                f"per_day={self.matches_per_day}, double={self.double_round_robin})")
