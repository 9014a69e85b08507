# -*- coding: utf-8 -*-

"""Configuration module of the logs.

This module configure the python ``logging`` module, in order to have useful
and easy to activate logs when running the promise module, typically under a
compliance test harness.

Log entries are displayed to the output console and, optionally, written in a
file. On console output, if the system supports it, logs entries will be
colorized.
"""

import logging
import sys

from . import config

_logger = logging.getLogger(__name__)


def _support_color_output():
    """True if stdout is a terminal able to display ANSI colors."""
    isatty = getattr(sys.stdout, 'isatty', None)
    return bool(isatty and isatty()) and not sys.platform.startswith('win')


class ColoredFormatter(logging.Formatter):
    """Formatter highlighting the level, the logger name and the errors.

    Colors are ANSI escape codes: it's only used for terminal output.
    """

    RESET = '\033[0m'
    NAME_COLOR = '\033[36m'
    DATE_COLOR = '\033[30;1m'
    ERROR_COLOR = '\033[31;1m'
    LEVEL_COLORS = {
        logging.DEBUG: '\033[34m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[31;1m'
    }

    def _paint(self, text, color):
        return '%s%s%s' % (color, text, self.RESET)

    def formatTime(self, record, datefmt=None):
        return self._paint(logging.Formatter.formatTime(self, record, datefmt),
                           self.DATE_COLOR)

    def formatException(self, ei):
        # Only the last line, "ErrorType: message", is highlighted.
        text = logging.Formatter.formatException(self, ei)
        trace, _, last_line = text.rpartition('\n')
        return '%s\n%s' % (trace, self._paint(last_line, self.ERROR_COLOR))

    def format(self, record):
        # The record is shared between handlers: colorize a copy.
        record = logging.makeLogRecord(record.__dict__)
        record.name = self._paint(record.name, self.NAME_COLOR)
        record.levelname = self._paint(
            record.levelname, self.LEVEL_COLORS.get(record.levelno, ''))
        return logging.Formatter.format(self, record)


class Context(object):
    """Context class used to open and close log handlers.

    At enter, the handlers are added to the root logger, and the log levels
    are set according to the config entries ``debug_mode`` and
    ``log_levels``. At exit, the handlers are removed and closed.
    """

    date_format = '%Y-%m-%d %H:%M:%S'
    string_format = '%(asctime)s %(levelname)-7s %(name)s - %(message)s'

    def __init__(self, filename=None, stream=None):
        """Prepare a new log context.

        Args:
            filename (str, optional): path of a log file. If not set, logs
                are only written to the console.
            stream (file, optional): console stream. Default to stderr.
        """
        self._filename = filename
        self._stream = stream
        self._handlers = []

    def __enter__(self):
        """Open the log file and prepare the logging module."""

        logging.captureWarnings(True)

        formatter = logging.Formatter(fmt=self.string_format,
                                      datefmt=self.date_format)

        stream_handler = logging.StreamHandler(self._stream)
        if self._stream is None and _support_color_output():
            stream_handler.setFormatter(
                ColoredFormatter(fmt=self.string_format,
                                 datefmt=self.date_format))
        else:
            stream_handler.setFormatter(formatter)
        self._add_handler(stream_handler)

        if self._filename:
            try:
                file_handler = logging.FileHandler(self._filename)
            except OSError:
                _logger.warning('Unable to create the log file',
                                exc_info=True)
            else:
                file_handler.setFormatter(formatter)
                self._add_handler(file_handler)

        set_debug_mode(config.get('debug_mode'))
        set_logs_level(config.get('log_levels'))
        return self

    def _add_handler(self, handler):
        logging.getLogger().addHandler(handler)
        self._handlers.append(handler)

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Release resources (log files, ...)"""
        _logger.debug('Stop logger ...')
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        del self._handlers[:]
        logging.captureWarnings(False)


def _parse_level(level):
    """Convert a level from the config ('debug', '10' or 10) to a number.

    Raises:
        ValueError: if the level is not a known level name, nor a number.
    """
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    number = logging.getLevelName(name)
    if not isinstance(number, int):
        raise ValueError(level)
    return number


def set_logs_level(levels):
    """Set the level of each logger named in ``levels``.

    Args:
        levels (dict): logger name -> level. A level is a number, or the name
            of a logging level, case-insensitive. Invalid levels are logged
            and skipped.

    Example:

        >>> # Debug logs of the scheduler only.
        >>> set_logs_level({'thenable': 'info',
        ...                 'thenable.promise.scheduler': 'debug'})
    """
    for name, level in sorted(levels.items()):
        try:
            number = _parse_level(level)
        except ValueError:
            _logger.warning('Invalid log level %r for logger "%s": ignored.',
                            level, name)
            continue
        logging.getLogger(name).setLevel(number)


def set_debug_mode(debug):
    """Set, or unset the debug log level.

    Note: modules others than thenable.* are not set to DEBUG, even in DEBUG
    mode. If needed, their level can be set by ``set_logs_level()``.

    Args:
        debug (boolean): if True, the thenable log level will be set to DEBUG.
            If False, it will be set to INFO.
    """
    if debug:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger('thenable').setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger('thenable').setLevel(logging.INFO)
