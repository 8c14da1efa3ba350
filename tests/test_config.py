import json

import pytest

from mailscan import config
from mailscan.config import ConfigError, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    for name in ('HEADERS', 'JOBS', 'LOG_LEVEL'):
        monkeypatch.delenv(config.ENV_PREFIX + name, raising=False)


def test_defaults_without_config_file():
    assert load_settings() == Settings()
    assert Settings().headers == ['from', 'subject']


def test_config_path_uses_xdg(tmp_path):
    assert config.config_path() == str(tmp_path / 'xdg' / 'mailscan' / 'config.json')


def test_default_config_file_is_read(tmp_path):
    cfg_dir = tmp_path / 'xdg' / 'mailscan'
    cfg_dir.mkdir(parents=True)
    (cfg_dir / 'config.json').write_text(json.dumps({'jobs': 3}))
    assert load_settings().jobs == 3


def test_json_config(tmp_path):
    p = tmp_path / 'c.json'
    p.write_text(json.dumps({'headers': ['From', 'Date'], 'subject-color': 'yellow', 'jobs': '4'}))
    s = load_settings(str(p))
    assert s.headers == ['from', 'date']
    assert s.subject_color == 'yellow'
    assert s.jobs == 4


def test_key_value_config(tmp_path):
    p = tmp_path / 'c.txt'
    p.write_text('# my settings\nheaders from, subject, date\n\nmailbox_color green\n')
    s = load_settings(str(p))
    assert s.headers == ['from', 'subject', 'date']
    assert s.mailbox_color == 'green'


def test_unknown_keys_are_ignored(tmp_path, caplog):
    p = tmp_path / 'c.json'
    p.write_text(json.dumps({'colour': 'red'}))
    assert load_settings(str(p)) == Settings()
    assert 'colour' in caplog.text


def test_environment_overrides_file(tmp_path, monkeypatch):
    p = tmp_path / 'c.json'
    p.write_text(json.dumps({'jobs': 2}))
    monkeypatch.setenv('MAILSCAN_JOBS', '6')
    monkeypatch.setenv('MAILSCAN_HEADERS', 'subject')
    s = load_settings(str(p))
    assert s.jobs == 6
    assert s.headers == ['subject']


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(str(tmp_path / 'missing.json'))


@pytest.mark.parametrize('content', [
    '{"jobs": "many"}',
    '{"jobs": 0}',
    '{"headers": []}',
    '{"log_level": "loud"}',
    '[1, 2]',
    'just-a-key',
])
def test_invalid_config(tmp_path, content):
    p = tmp_path / 'bad'
    p.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(str(p))


def test_log_level_is_normalized(monkeypatch):
    monkeypatch.setenv('MAILSCAN_LOG_LEVEL', 'debug')
    assert load_settings().log_level == 'DEBUG'
