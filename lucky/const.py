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

"""Constants used in lucky."""
import enum
import re

# environment variables read by lucky itself
LOG_LEVEL_ENV_VAR = "LUCKY_LOG_LEVEL"
DAEMON_LOG_LEVEL_ENV_VAR = "LUCKY_DAEMON_LOG_LEVEL"
STATE_DIR_ENV_VAR = "LUCKY_STATE_DIR"
CHARM_DIR_ENV_VAR = "LUCKY_CHARM_DIR"
START_TIMEOUT_ENV_VAR = "LUCKY_DAEMON_START_TIMEOUT"

# environment variables exported to the hook scripts
HOOK_NAME_ENV_VAR = "LUCKY_HOOK_NAME"
SCRIPT_ID_ENV_VAR = "LUCKY_SCRIPT_ID"

# environment variables set by Juju
JUJU_CHARM_DIR_ENV_VAR = "JUJU_CHARM_DIR"
JUJU_UNIT_NAME_ENV_VAR = "JUJU_UNIT_NAME"

LUCKY_FILENAME = "lucky.yaml"
HOST_SCRIPTS_DIRNAME = "host_scripts"
HOOKS_DIRNAME = "hooks"

DAEMON_SOCKET_FILENAME = "daemon.sock"
DAEMON_LOCK_FILENAME = "daemon.lock"
DAEMON_LOG_FILENAME = "daemon.log"

DEFAULT_UNIT_NAME = "local"
DEFAULT_START_TIMEOUT = 10.0
# polling interval while waiting for a starting daemon
START_POLL_INTERVAL = 0.05

# seconds a new daemon insists on taking the unit's lock before giving up
DAEMON_LOCK_TIMEOUT = 0.5
# exit code of a daemon process that could not take the unit's lock
DAEMON_EXIT_ALREADY_RUNNING = 3

HOOK_NAME_REGEX = re.compile(r"^[a-z][a-z0-9-]*$")


class LogLevel(str, enum.Enum):
    """Values accepted by the log level environment variables."""

    OFF = "off"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"

    def __str__(self) -> str:
        return self.value


class ScriptState(str, enum.Enum):
    """Workload states a script can report, in increasing precedence."""

    ACTIVE = "active"
    WAITING = "waiting"
    MAINTENANCE = "maintenance"
    BLOCKED = "blocked"

    def __str__(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        """Position of the state when consolidating several statuses."""
        return list(ScriptState).index(self)
