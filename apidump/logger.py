# -*- coding: utf-8 -*-
"""
Logging for apidump

Thin layer over the stdlib ``logging`` package so that every module logs
the same way:

    from apidump.logger import logger
    logger.debug("Section decoded", section="Defines", count=3)
    logger.error("Expected literal", location=loc, exc_type=GrammarMismatch)

``logger.error`` logs and then raises ``exc_type`` when one is given, so
error sites read as a single statement.

The default level comes from APIDUMP_LOG_LEVEL (DEBUG, INFO, WARNING,
ERROR, CRITICAL); WARNING when unset.
"""

import logging
import os
from enum import IntEnum
from typing import Optional

from .errors import DecodeError


class LogLevel(IntEnum):
    """Log levels, ordered like the stdlib ones"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def _level_from_env(default: LogLevel = LogLevel.WARNING) -> LogLevel:
    name = os.environ.get('APIDUMP_LOG_LEVEL', '').strip().upper()
    if not name:
        return default
    try:
        return LogLevel[name]
    except KeyError:
        return default


def _format_context(message: str, location=None, context: Optional[dict] = None) -> str:
    """Append location and key=value context to a message"""
    text = message
    if location is not None:
        text = f"{text} at {location}"
    if context:
        details = ", ".join(f"{key}={value!r}" for key, value in context.items())
        text = f"{text} [{details}]"
    return text


class Logger:
    """Project logger with keyword context and raise-on-error support"""

    def __init__(self, name: str = 'apidump'):
        self._log = logging.getLogger(name)
        if not self._log.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._log.addHandler(handler)
        self._log.propagate = False
        self._log.setLevel(_level_from_env())

    @property
    def level(self) -> LogLevel:
        return LogLevel(self._log.level)

    def set_level(self, level: LogLevel):
        self._log.setLevel(int(level))

    def is_enabled(self, level: LogLevel) -> bool:
        return self._log.isEnabledFor(int(level))

    def debug(self, message: str, **context):
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug(_format_context(message, context=context))

    def info(self, message: str, **context):
        if self._log.isEnabledFor(logging.INFO):
            self._log.info(_format_context(message, context=context))

    def warning(self, message: str, location=None, **context):
        self._log.warning(_format_context(message, location, context))

    def error(self, message: str, location=None, exc_type=None, **context):
        """
        Log an error and optionally raise.

        Args:
            message: Human readable description
            location: Optional SourceLocation of the offending byte
            exc_type: Exception class to raise after logging. DecodeError
                subclasses receive ``location``; others get the formatted
                message only.
            **context: Extra key=value details for the log line

        Raises:
            exc_type: if given
        """
        self._log.error(_format_context(message, location, context))
        if exc_type is None:
            return
        if issubclass(exc_type, DecodeError):
            raise exc_type(message, location=location)
        raise exc_type(_format_context(message, location))


logger = Logger()


def set_log_level(level: LogLevel):
    """Set the level of the shared project logger"""
    logger.set_level(level)


def get_log_level() -> LogLevel:
    return logger.level
