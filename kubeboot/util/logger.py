"""This module defines logging capabilities for kubeboot.

Messages go to STDOUT in colour and, once :func:`log_to_file` was called,
to the per-node log file as plain text.
"""

import logging
import os
import re
import sys
import time

# pylint: disable=no-name-in-module
from huepy import (bad, red, info as infomsg, yellow, run, grey,
                   que, good, green)

LOG_LEVELS = list(range(5))
DEFAULT_LOG_LEVEL = 3

ROOT_LOGGER = "kubeboot"
FILE_FORMAT = "%(asctime)s %(message)s"

# above CRITICAL, nothing reaches the console
QUIET = logging.CRITICAL + 10
HANDLER_LEVELS = {0: QUIET,
                  1: logging.ERROR,
                  2: logging.WARNING,
                  3: logging.INFO,
                  4: logging.DEBUG}

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


class ConsoleHandler(logging.StreamHandler):
    """The STDOUT handler, its level follows the verbosity."""


def console_handlers(logger):
    """the console handlers a record of ``logger`` passes through"""
    found = []
    while logger:
        found.extend(h for h in logger.handlers
                     if isinstance(h, ConsoleHandler))
        if not logger.propagate:
            break
        logger = logger.parent
    return found


def get_logger(name):
    """Returns a Python logger printing to STDOUT.

    Loggers below ``kubeboot`` share one console handler on the
    ``kubeboot`` logger, so the verbosity applies to all modules at once.
    Calling this twice does not add a second handler, otherwise every
    message would be printed twice.

    Args:
        name (str): The name of the Logger.

    Returns:
        A Python Logger.
    """

    log = logging.getLogger(name)
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        owner = logging.getLogger(ROOT_LOGGER)
    else:
        owner = log

    if not any(isinstance(h, ConsoleHandler) for h in owner.handlers):
        sh = ConsoleHandler(sys.stdout)
        fmt = logging.Formatter("%(message)s")
        sh.setFormatter(fmt)
        owner.addHandler(sh)

    set_level(log, Logger.LOG_LEVEL)
    return log


def set_level(logger, level):
    """Sets the console logging level.

    kubeboot levels map onto the Python ones: 1 is ERROR, 2 WARNING,
    3 INFO and 4 DEBUG. Level 0 silences the console.

    The logger itself stays at DEBUG, the per-node log file gets every
    message regardless of the verbosity.

    Args:
        logger: A Python logger object.
        level (int): The logging level.

    Raises:
        ValueError if log level is unsupported.
    """

    if level not in LOG_LEVELS:
        raise ValueError(f"log level {level} is not supported")

    logger.disabled = False
    logger.setLevel(logging.DEBUG)
    for handler in console_handlers(logger):
        handler.setLevel(HANDLER_LEVELS[level])


class PlainFormatter(logging.Formatter):
    """A formatter which removes terminal colour codes.

    The console output is coloured with huepy, the log file should stay
    readable with ``less`` and ``grep``.
    """

    def format(self, record):
        return ANSI_ESCAPE.sub("", super().format(record))


def log_to_file(path, truncate=True):
    """Also write every kubeboot message to ``path``.

    The handler is attached to the ``kubeboot`` parent logger, so messages
    of all modules end up in the same file. It records info level and
    above whatever the console verbosity is. A previous file handler is
    replaced.

    Args:
        path (str): The log file, usually keyed by the host name.
        truncate (bool): Remove an existing file first.

    Returns:
        The ``logging.FileHandler`` which was added.
    """
    parent = logging.getLogger(ROOT_LOGGER)
    for handler in list(parent.handlers):
        if isinstance(handler, logging.FileHandler):
            parent.removeHandler(handler)
            handler.close()

    if truncate and os.path.exists(path):
        os.remove(path)

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(PlainFormatter(FILE_FORMAT))
    parent.addHandler(handler)
    return handler


class Singleton(type):
    """Metaclass to implement the Singleton pattern.

    Only used for the :class:`Logger`, so all modules share one logger
    object instead of passing it around.

    The metaclass remembers the instance it created per class. Calling
    the class again re-runs ``__init__`` on that instance and returns it.

    Example:
        >>> log1 = Logger(__name__)
        >>> log2 = Logger("kubeboot.executor")
        >>> id(log1) == id(log2)
        True
    """
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        else:
            cls._instances[cls].__init__(*args, **kwargs)

        return cls._instances[cls]


class Logger(metaclass=Singleton):
    """Proxy for a ``logging.Logger`` with coloured output.

    Set ``Logger.LOG_LEVEL`` before the first instantiation:

    .. code:: shell

        * 0 - quiet (no output)
        * 1 - error
        * 2 - warning
        * 3 - info
        * 4 - debug

    Every method except :meth:`.Logger.question` accepts ``%``-style
    arguments.

    Example:
        >>> log = Logger(__name__)
        >>> log.info("waiting for %s", "nodeJoinFile")
        [~] waiting for nodeJoinFile

    Attributes:
        LOG_LEVEL (int): The log level to be used across the application.

    Args:
        name (str): The name of the logger.
    """

    LOG_LEVEL = DEFAULT_LOG_LEVEL

    def __init__(self, name):
        self.logger = get_logger(name)

    @property
    def level(self):
        """The Python level of the console, 0 if quiet, None if not
        instantiated."""
        if not self.logger:
            return None

        handlers = console_handlers(self.logger)
        if not handlers or handlers[0].level == QUIET:
            return 0

        return handlers[0].level

    @level.setter
    def level(self, level):
        level_to_int = {
            'quiet': 0,
            'error': 1,
            'warning': 2,
            'info': 3,
            'debug': 4}

        try:
            level = level_to_int[level]
        except KeyError:
            level = int(level)

        set_level(self.logger, level)

    def error(self, msg, *args, color=True, **kwargs):
        """Logs ``msg`` on error level, in red with ``[-]``."""

        if color:
            msg = bad(red(msg))

        self.logger.error(msg, *args, **kwargs)

    def warning(self, msg, *args, color=True, **kwargs):
        """Logs ``msg`` on warning level, in yellow with ``[!]``."""

        if color:
            msg = infomsg(yellow(msg))

        self.logger.warning(msg, *args, **kwargs)

    def warn(self, msg, *args, color=True, **kwargs):
        """Same as :meth:`.Logger.warning`."""

        self.warning(msg, *args, **kwargs, color=color)

    def info(self, msg, *args, color=True, **kwargs):
        """Logs ``msg`` on info level, in grey with ``[~]``."""

        if color:
            msg = run(grey(msg))

        self.logger.info(msg, *args, **kwargs)

    def debug(self, msg, *args, color=True, **kwargs):
        """Logs ``msg`` on debug level.

        When coloured, the message is prefixed with the current time:

        Example:
            >>> log.debug("kubeadm init")
            [20190426-155611] kubeadm init
        """

        if color:
            now = time.strftime("%Y%m%d-%H%M%S")
            msg = grey(f"[{now}] {msg}")

        self.logger.debug(msg, *args, **kwargs)

    def success(self, msg, *args, color=True, **kwargs):
        """Logs ``msg`` on info level, in green with ``[+]``."""

        if color:
            msg = good(green(msg))

        self.logger.info(msg, *args, **kwargs)

    @staticmethod
    def question(msg, color=True):
        """Prints a question, regardless of the log level.

        No %-formatting here.
        """

        if color:
            msg = que(msg)

        print(msg)
