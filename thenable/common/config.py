# -*- coding: utf-8 -*-

"""Manages settings and config file.

Settings are loaded from a configuration file. If they don't exists, default
values are provided.
When an option is set, and a config file has been loaded, the file is updated.

The config file path is either given to ``load()``, either read from the
``THENABLE_CONFIG`` environment variable. Without any file, all entries keep
their default values.

Example of config file::

    [config]
    scheduler = queue
    debug_mode = true
    log_levels = thenable=info;thenable.promise.scheduler=debug
"""

import configparser
import logging
import os

_logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = 'THENABLE_CONFIG'

# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'scheduler': {'type': str, 'default': 'queue'},
    'debug_mode': {'type': bool, 'default': False},
    'log_levels': {'type': dict, 'default': {}}
}

# Actual config parser
_config_parser = configparser.ConfigParser()
_config_parser.add_section('config')

_config_file_path = None


def load(path=None):
    """Find and load the config file.

    Args:
        path (str, optional): path of the config file. By default, the value
            of the environment variable ``THENABLE_CONFIG`` is used.
    Returns:
        boolean: True if a config file has been read; False otherwise.
    """
    global _config_file_path

    path = path or os.environ.get(ENV_CONFIG_PATH)
    if not path:
        _logger.debug('No config file set. Default values will be used.')
        return False

    _config_file_path = path
    if not _config_parser.read(path):
        _logger.warning('Unable to load config file: %s', path)
        return False
    return True


def reset():
    """Forget all values loaded or set. Defaults apply again."""
    global _config_parser, _config_file_path

    _config_parser = configparser.ConfigParser()
    _config_parser.add_section('config')
    _config_file_path = None


def get(key):
    """Find and return a configuration entry

    If the entry is not specified in the config file, a default value is
    returned.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean('config', key)
        elif _default_config[key]['type'] is int:
            return _config_parser.getint('config', key)
        elif _default_config[key]['type'] is dict:
            # Dict entries are in the form 'key=value;key2=value2'
            dict_str = _config_parser.get('config', key)
            result = {}
            for pair in filter(None, dict_str.split(';')):
                try:
                    (k, v) = pair.split('=')
                    result[k.strip()] = v.strip()
                except ValueError:
                    _logger.warning('Unable to parse pair key=value: "%s"',
                                    pair)
            return result
        else:
            return _config_parser.get('config', key)
    except configparser.NoOptionError:
        return _default_config[key]['default']
    except ValueError:
        _logger.warning('Invalid value for config entry "%s". Default value '
                        'will be used.', key)
        return _default_config[key]['default']


def set(key, value):
    """Set a configuration entry.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string. Dict
            values are converted to the form 'key=value;key2=value2'.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    if isinstance(value, dict):
        value = ';'.join('%s=%s' % pair for pair in sorted(value.items()))
    _config_parser.set('config', key, str(value))

    if not _config_file_path:
        return
    try:
        with open(_config_file_path, 'w') as config_file:
            _config_parser.write(config_file)
        _logger.debug('Config file modified.')
    except IOError:
        _logger.warning('Unable to write in the config file', exc_info=True)
