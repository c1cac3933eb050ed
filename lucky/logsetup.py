# Copyright 2026 Canonical Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# For further info, check https://github.com/katharostech/lucky

"""Set up logging for the daemon process.

The command line front-end reports through craft-cli's Emitter; the daemon runs
detached from any terminal so everything goes to its log file instead.
"""

import logging
import pathlib

from lucky import __version__
from lucky.const import LogLevel

FORMATTER_DETAILED = "%(asctime)s  %(name)-30s %(levelname)-8s %(message)s"

# loggers whose records end in the daemon log
LOGGER_NAMES = ("lucky", "uvicorn", "fastapi")

_levels = {
    LogLevel.OFF: logging.CRITICAL + 10,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: logging.DEBUG,
}


def get_logging_level(level: LogLevel) -> int:
    """Translate lucky's log level into the logging module's one."""
    return _levels[level]


def configure(log_path: pathlib.Path, level: LogLevel) -> logging.Handler:
    """Send the daemon's logs to the given file.

    :returns: the installed handler, so it can be removed on shutdown.
    """
    handler = logging.FileHandler(log_path)
    handler.setFormatter(logging.Formatter(FORMATTER_DETAILED))
    handler.setLevel(get_logging_level(level))
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("lucky").debug("Starting lucky daemon version %s", __version__)
    return handler


def unconfigure(handler: logging.Handler) -> None:
    """Remove the handler installed by configure and close its file."""
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.removeHandler(handler)
        logger.propagate = True
    handler.close()
