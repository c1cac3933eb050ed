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

"""Main entry point module for all the tool functionality."""

import logging
import os
import platform
import sys

from craft_cli import (
    ArgumentParsingError,
    CommandGroup,
    CraftError,
    Dispatcher,
    EmitterMode,
    ProvideHelpException,
    emit,
)

from lucky import __version__, const, env
from lucky.commands import daemon, hooks, status, version

# set up the lib's loggers in DEBUG level so their content is grabbed by craft-cli's Emitter
for lib_name in ("lucky",):
    logger = logging.getLogger(lib_name)
    logger.setLevel(logging.DEBUG)


# the summary of the whole program
GENERAL_SUMMARY = """
Lucky helps writing Juju charms as plain scripts.

A lucky daemon runs for each unit; the charm's hooks ask it to run the
scripts declared in the charm's lucky.yaml, one hook at a time.

See https://github.com/katharostech/lucky for more information.
"""

# Collect commands in different groups, for easier human consumption. Note that order here is
# important when listing commands and showing help.
_daemon_commands = [
    daemon.DaemonCommand,
    status.SetStatusCommand,
]
_charm_commands = [
    hooks.CreateHooksCommand,
]
_basic_commands = [
    version.VersionCommand,
]
COMMAND_GROUPS = [
    CommandGroup("Daemon", _daemon_commands),
    CommandGroup("Charm", _charm_commands),
    CommandGroup("Basic", _basic_commands),
]

# non-lucky useful environment variables to log
EXTRA_ENVIRONMENT = (const.JUJU_UNIT_NAME_ENV_VAR, const.JUJU_CHARM_DIR_ENV_VAR)

# how the levels in LUCKY_LOG_LEVEL map to craft-cli modes
_EMITTER_MODES = {
    const.LogLevel.OFF: EmitterMode.QUIET,
    const.LogLevel.ERROR: EmitterMode.QUIET,
    const.LogLevel.WARN: EmitterMode.QUIET,
    const.LogLevel.INFO: EmitterMode.BRIEF,
    const.LogLevel.DEBUG: EmitterMode.DEBUG,
    const.LogLevel.TRACE: EmitterMode.TRACE,
}


def _get_system_details():
    """Produce details about the system."""
    useful_env = {
        name: value
        for name, value in os.environ.items()
        if name.startswith("LUCKY") or name in EXTRA_ENVIRONMENT
    }
    env_string = ", ".join(f"{name}={value!r}" for name, value in sorted(useful_env.items()))
    if not env_string:
        env_string = "None"
    return f"System details: {platform.system()} {platform.release()}; Environment: {env_string}"


def _emit_error(error, cause=None):
    """Emit the error in a centralized way so we can alter it consistently."""
    # set the cause, if any
    if cause is not None:
        error.__cause__ = cause
    emit.error(error)


def _init_emitter():
    """Start the emitter in the mode asked in the environment.

    :returns: the error found reading the environment, if any, to be reported once the
        emitter is ready.
    """
    try:
        mode = _EMITTER_MODES[env.get_log_level()]
        problem = None
    except CraftError as err:
        mode = EmitterMode.BRIEF
        problem = err
    emit.init(mode, "lucky", f"Starting lucky version {__version__}")
    return problem


def main(argv=None):
    """Provide the main entry point."""
    if argv is None:
        argv = sys.argv

    problem = _init_emitter()
    if problem is not None:
        _emit_error(problem)
        return problem.retcode

    # process
    try:
        dispatcher = Dispatcher("lucky", COMMAND_GROUPS, summary=GENERAL_SUMMARY)
        dispatcher.pre_parse_args(argv[1:])
        dispatcher.load_command(None)
        emit.debug(_get_system_details())
        retcode = dispatcher.run()

    except ArgumentParsingError as err:
        print(err, file=sys.stderr)  # to stderr, as argparse normally does
        emit.ended_ok()
        retcode = 1
    except ProvideHelpException as err:
        print(err, file=sys.stderr)  # to stderr, as argparse normally does
        emit.ended_ok()
        retcode = 0
    except CraftError as err:
        _emit_error(err)
        retcode = err.retcode
    except KeyboardInterrupt as exc:
        error = CraftError("Interrupted.")
        _emit_error(error, cause=exc)
        retcode = 1
    except Exception as err:
        error = CraftError(f"lucky internal error: {err!r}")
        _emit_error(error, cause=err)
        retcode = 1
    else:
        emit.ended_ok()
        if retcode is None:
            retcode = 0

    return retcode


if __name__ == "__main__":
    sys.exit(main(sys.argv))
