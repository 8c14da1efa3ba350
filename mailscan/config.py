"""User settings: defaults, an optional config file and environment overrides.

The config file is either a JSON object::

    {"headers": ["from", "subject", "date"], "jobs": 4}

or simple ``key value`` lines (``#`` starts a comment)::

    headers from,subject,date
    subject_color yellow
"""
import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import List, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = 'MAILSCAN_'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(Exception):
    """The configuration file or an override could not be used."""


@dataclass
class Settings:
    headers: List[str] = field(default_factory=lambda: ['from', 'subject'])
    mailbox_color: str = 'magenta'
    from_color: str = 'cyan'
    subject_color: str = 'bright_cyan'
    jobs: int = 1
    log_level: str = 'WARNING'


def config_path() -> str:
    """Return the default config file location (platform aware)."""
    if os.name == 'nt':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
    else:
        base = os.environ.get('XDG_CONFIG_HOME', os.path.join(os.path.expanduser('~'), '.config'))
    return os.path.join(base, 'mailscan', 'config.json')


def _split_headers(value) -> List[str]:
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f'headers must be a list or comma-separated string, got {value!r}')
    headers = [str(v).strip().lower() for v in value if str(v).strip()]
    if not headers:
        raise ConfigError('headers must name at least one header')
    return headers


def _coerce(name: str, value):
    if name == 'headers':
        return _split_headers(value)
    if name == 'jobs':
        try:
            jobs = int(value)
        except (TypeError, ValueError):
            raise ConfigError(f'jobs must be an integer, got {value!r}')
        if jobs < 1:
            raise ConfigError(f'jobs must be at least 1, got {jobs}')
        return jobs
    if name == 'log_level':
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f'log_level must be one of {", ".join(LOG_LEVELS)}, got {value!r}')
        return level
    return str(value).strip()


def _parse_config_text(raw: str) -> dict:
    raw = raw.strip()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        data = None
    if data is not None:
        if not isinstance(data, dict):
            raise ConfigError('JSON config must be an object')
        return data

    mapping = {}
    for line in raw.splitlines():
        s = line.strip()
        if not s or s.startswith('#'):
            continue
        parts = s.split(None, 1)
        if len(parts) != 2:
            raise ConfigError(f'Expected "key value", got {s!r}')
        mapping[parts[0]] = parts[1].strip()
    return mapping


def apply_overrides(settings: Settings, values: dict, source: str) -> Settings:
    """Set known fields from ``values``; unknown keys are logged and ignored."""
    known = {f.name for f in fields(Settings)}
    for key, value in values.items():
        name = key.strip().lower().replace('-', '_')
        if name not in known:
            logger.warning('Ignoring unknown setting %r in %s', key, source)
            continue
        setattr(settings, name, _coerce(name, value))
    return settings


def _env_values() -> dict:
    values = {}
    for name in ('headers', 'jobs', 'log_level'):
        env = os.environ.get(ENV_PREFIX + name.upper())
        if env:
            values[name] = env
    return values


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from defaults, the config file and the environment.

    A missing default config file is fine; an explicit ``path`` that cannot be
    read raises ConfigError.
    """
    settings = Settings()
    explicit = path is not None
    path = path or config_path()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f'Config file not found: {path}')
        raw = ''
    except OSError as e:
        raise ConfigError(f'Failed to read config {path}: {e}')

    apply_overrides(settings, _parse_config_text(raw), path)
    apply_overrides(settings, _env_values(), 'environment')
    return settings
