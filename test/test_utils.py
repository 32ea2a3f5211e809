import logging
import pytest
from instlib import utils
from instlib import validation as val
from instlib import exceptions as exc


class FakeAuth:
    def __init__(self, **values):
        self.values = values

    def get(self, name):
        return self.values.get(name)


def test_log_level_default():
    assert isinstance(utils.configured_log_level(), int)


def test_log_level_names(monkeypatch):
    monkeypatch.setattr(utils, 'auth', FakeAuth(**{'log-level': 'debug'}))
    assert utils.configured_log_level() == logging.DEBUG

    monkeypatch.setattr(utils, 'auth', FakeAuth())
    assert utils.configured_log_level() == logging.INFO


def test_log_level_bad(monkeypatch):
    monkeypatch.setattr(utils, 'auth', FakeAuth(**{'log-level': 'LOUD'}))
    with pytest.raises(exc.ConfigurationError):
        utils.configured_log_level()


def test_local_names_string(monkeypatch):
    monkeypatch.setattr(utils, 'auth', FakeAuth(**{'local-names': 'sqlbox, Other-Box  third'}))
    assert utils.configured_local_names() == {'sqlbox', 'other-box', 'third'}
    assert val.is_localhost('SQLBOX')
    assert val.is_localhost('third')
    assert not val.is_localhost('fourth')


def test_local_names_list(monkeypatch):
    monkeypatch.setattr(utils, 'auth', FakeAuth(**{'local-names': ['a-box', '']}))
    assert utils.configured_local_names() == {'a-box'}


def test_local_names_unset(monkeypatch):
    monkeypatch.setattr(utils, 'auth', FakeAuth())
    assert utils.configured_local_names() == frozenset()


def test_local_names_broken_config(monkeypatch):
    class Broken:
        def get(self, name):
            raise exc.ConfigurationError('lol')

    monkeypatch.setattr(utils, 'auth', Broken())
    assert not val.is_localhost('definitely-not-this-machine')


def test_local_names_broken_config_warns_once(monkeypatch, caplog):
    class Broken:
        def get(self, name):
            raise exc.ConfigurationError('local-names is not a list')

    monkeypatch.setattr(utils, 'auth', Broken())
    monkeypatch.setattr(val, '_warned_local_names', set())
    with caplog.at_level(logging.DEBUG, logger='instlib'):
        for _ in range(3):
            assert not val.is_localhost('definitely-not-this-machine')

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1, warnings
    assert not [r for r in caplog.records if r.exc_info]


def test_isolated_user_config():
    from instlib import config
    assert utils.auth is config.auth
    assert config.auth.user_config._path is None
