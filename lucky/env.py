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

"""Lucky environment utilities."""
import os
import pathlib

import platformdirs
from craft_cli import CraftError

from lucky import const


def get_unit_name() -> str:
    """Name of the Juju unit lucky is running for."""
    return os.getenv(const.JUJU_UNIT_NAME_ENV_VAR) or const.DEFAULT_UNIT_NAME


def get_charm_dir() -> pathlib.Path:
    """Path of the charm being run.

    Juju exports it on every hook; it can be overridden for local development.
    """
    charm_dir = os.getenv(const.CHARM_DIR_ENV_VAR) or os.getenv(const.JUJU_CHARM_DIR_ENV_VAR)
    if charm_dir is None:
        return pathlib.Path.cwd()
    return pathlib.Path(charm_dir).expanduser().resolve()


def get_state_dir() -> pathlib.Path:
    """Path of the directory holding the unit's daemon socket, lock and log.

    The directory is not created here; only starting the daemon does that.
    """
    state_dir_env = os.getenv(const.STATE_DIR_ENV_VAR)
    if state_dir_env:
        state_dir = pathlib.Path(state_dir_env).expanduser().resolve()
    else:
        unit_dirname = get_unit_name().replace("/", "-")
        state_dir = platformdirs.user_state_path(appname="lucky") / unit_dirname
    return state_dir


def get_socket_path(state_dir: pathlib.Path | None = None) -> pathlib.Path:
    """Path for the daemon's unix socket."""
    return (state_dir or get_state_dir()) / const.DAEMON_SOCKET_FILENAME


def get_lock_path(state_dir: pathlib.Path | None = None) -> pathlib.Path:
    """Path for the daemon's liveness lock file."""
    return (state_dir or get_state_dir()) / const.DAEMON_LOCK_FILENAME


def get_daemon_log_path(state_dir: pathlib.Path | None = None) -> pathlib.Path:
    """Path for the daemon's log file."""
    return (state_dir or get_state_dir()) / const.DAEMON_LOG_FILENAME


def _get_log_level(env_var: str, default: const.LogLevel) -> const.LogLevel:
    value = os.getenv(env_var)
    if not value:
        return default
    try:
        return const.LogLevel(value.strip().lower())
    except ValueError:
        valid = ", ".join(repr(str(level)) for level in const.LogLevel)
        raise CraftError(
            f"Invalid value {value!r} in {env_var}.",
            resolution=f"Use one of {valid}.",
        ) from None


def get_log_level() -> const.LogLevel:
    """Log level requested for this command line invocation."""
    return _get_log_level(const.LOG_LEVEL_ENV_VAR, const.LogLevel.INFO)


def get_daemon_log_level() -> const.LogLevel:
    """Log level requested for the daemon."""
    return _get_log_level(const.DAEMON_LOG_LEVEL_ENV_VAR, const.LogLevel.INFO)


def get_start_timeout() -> float:
    """Seconds to wait for a freshly spawned daemon to accept requests."""
    value = os.getenv(const.START_TIMEOUT_ENV_VAR)
    if not value:
        return const.DEFAULT_START_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        raise CraftError(
            f"Invalid value {value!r} in {const.START_TIMEOUT_ENV_VAR}.",
            resolution="Use a number of seconds.",
        ) from None
    if timeout <= 0:
        raise CraftError(f"{const.START_TIMEOUT_ENV_VAR} must be positive, got {value!r}.")
    return timeout
