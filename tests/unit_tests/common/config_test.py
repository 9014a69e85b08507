#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging

import pytest

from thenable.common import config

"""### TEST CASES ###
    ## load
    config file exist
    config file does not exist
    config path from environment
    no config path at all

    ##get
    key does not exist
    get a bool value
    get a bool with invalid value
    get a dict
    get a dict with invalid value
    get a not typed value

    ##set
    set a not existing key
    set a string value
    set a dict value
    set without loaded file
    set with loaded file
"""


class catchLogging(logging.NullHandler):
    """Handler keeping the records, for checking the warnings."""

    def __init__(self):
        logging.NullHandler.__init__(self)
        self.records = []

    def handle(self, record):
        self.records.append(record)


@pytest.fixture
def clean_config(request, monkeypatch):
    monkeypatch.delenv(config.ENV_CONFIG_PATH, raising=False)
    config.reset()
    request.addfinalizer(config.reset)


@pytest.fixture
def log_records(request):
    handler = catchLogging()
    logger = logging.getLogger(config.__name__)
    logger.addHandler(handler)
    request.addfinalizer(lambda: logger.removeHandler(handler))
    return handler.records


def _warnings(records):
    return [r for r in records if r.levelno == logging.WARNING]


def _write_config(path, content):
    path.write_text('[config]\n' + content)
    return str(path)


class TestConfigLoad(object):

    def test_load_without_path(self, clean_config):
        assert config.load() is False
        assert config.get('scheduler') == 'queue'

    def test_load_existing_file(self, clean_config, tmp_path):
        path = _write_config(tmp_path / 'thenable.ini', 'scheduler = thread\n')
        assert config.load(path) is True
        assert config.get('scheduler') == 'thread'

    def test_load_path_from_environment(self, clean_config, tmp_path,
                                        monkeypatch):
        path = _write_config(tmp_path / 'thenable.ini', 'debug_mode = yes\n')
        monkeypatch.setenv(config.ENV_CONFIG_PATH, path)
        assert config.load() is True
        assert config.get('debug_mode') is True

    def test_load_missing_file(self, clean_config, tmp_path, log_records):
        assert config.load(str(tmp_path / 'missing.ini')) is False
        assert config.get('debug_mode') is False
        assert _warnings(log_records)


class TestConfigGet(object):

    def test_get_unknown_key(self, clean_config):
        with pytest.raises(KeyError):
            config.get('foo')

    def test_get_default_values(self, clean_config):
        assert config.get('scheduler') == 'queue'
        assert config.get('debug_mode') is False
        assert config.get('log_levels') == {}

    def test_get_bool(self, clean_config, tmp_path):
        config.load(_write_config(tmp_path / 'c.ini', 'debug_mode = true\n'))
        assert config.get('debug_mode') is True

    def test_get_invalid_bool(self, clean_config, tmp_path, log_records):
        config.load(_write_config(tmp_path / 'c.ini', 'debug_mode = plop\n'))
        assert config.get('debug_mode') is False
        assert len(_warnings(log_records)) == 1

    def test_get_dict(self, clean_config, tmp_path):
        path = _write_config(tmp_path / 'c.ini',
                             'log_levels = thenable=debug;other = 40\n')
        config.load(path)
        assert config.get('log_levels') == {'thenable': 'debug',
                                            'other': '40'}

    def test_get_invalid_dict(self, clean_config, tmp_path, log_records):
        path = _write_config(tmp_path / 'c.ini',
                             'log_levels = thenable=debug;invalid\n')
        config.load(path)
        assert config.get('log_levels') == {'thenable': 'debug'}
        assert len(_warnings(log_records)) == 1


class TestConfigSet(object):

    def test_set_unknown_key(self, clean_config):
        with pytest.raises(KeyError):
            config.set('foo', 'bar')

    def test_set_without_file(self, clean_config):
        config.set('scheduler', 'thread')
        assert config.get('scheduler') == 'thread'

    def test_set_bool(self, clean_config):
        config.set('debug_mode', True)
        assert config.get('debug_mode') is True

    def test_set_dict(self, clean_config):
        config.set('log_levels', {'thenable': 'info', 'a.b': 10})
        assert config.get('log_levels') == {'a.b': '10', 'thenable': 'info'}

    def test_set_writes_loaded_file(self, clean_config, tmp_path):
        path = _write_config(tmp_path / 'c.ini', '')
        config.load(path)
        config.set('scheduler', 'thread')

        config.reset()
        config.load(path)
        assert config.get('scheduler') == 'thread'
