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

"""Script statuses and their consolidation into the unit's Juju status."""

import logging
import shutil
import subprocess
import threading
from collections.abc import Iterable, Mapping

import pydantic

from lucky.const import ScriptState
from lucky.errors import JujuToolError

logger = logging.getLogger(__name__)

STATUS_SET_COMMAND = "status-set"


class ScriptStatus(pydantic.BaseModel, frozen=True):
    """The status reported by one script."""

    state: ScriptState = ScriptState.ACTIVE
    message: str | None = None

    def __str__(self) -> str:
        if self.message:
            return f"{self.state}: {self.message}"
        return str(self.state)


def consolidate(statuses: Iterable[ScriptStatus]) -> ScriptStatus:
    """Merge several script statuses into one.

    The state with the highest precedence wins; all the messages are kept.
    """
    state = ScriptState.ACTIVE
    messages = []
    for status in statuses:
        if status.state.precedence > state.precedence:
            state = status.state
        if status.message:
            messages.append(status.message)
    return ScriptStatus(state=state, message=", ".join(messages) or None)


def set_juju_status(status: ScriptStatus, environment: Mapping[str, str]) -> None:
    """Set the unit's workload status through Juju's status-set hook tool.

    The environment must be the one of the hook being run, which gives access
    to the hook tools.
    """
    command = shutil.which(STATUS_SET_COMMAND, path=environment.get("PATH"))
    if command is None:
        raise JujuToolError(STATUS_SET_COMMAND, "command not found")

    cmd = [command, str(status.state), status.message or ""]
    logger.debug("Running %s", cmd)
    try:
        subprocess.run(cmd, env=dict(environment), check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as exc:
        reason = f"exited with status {exc.returncode}"
        if exc.stderr:
            reason += f": {exc.stderr.strip()}"
        raise JujuToolError(STATUS_SET_COMMAND, reason) from exc
    except OSError as exc:
        raise JujuToolError(STATUS_SET_COMMAND, str(exc)) from exc


class StatusBoard:
    """Statuses reported by the charm's scripts, keyed by script id."""

    def __init__(self) -> None:
        self._statuses: dict[str, ScriptStatus] = {}
        self._lock = threading.Lock()

    def set(
        self, script_id: str, status: ScriptStatus, environment: Mapping[str, str]
    ) -> ScriptStatus:
        """Store a script's status and publish the consolidated one to Juju."""
        logger.info("Setting status for script %r: %s", script_id, status)
        with self._lock:
            self._statuses[script_id] = status
            consolidated = consolidate(self._statuses.values())
            set_juju_status(consolidated, environment)
        return consolidated

    def get(self) -> ScriptStatus:
        """Return the consolidated status."""
        with self._lock:
            return consolidate(self._statuses.values())

    def __getitem__(self, script_id: str) -> ScriptStatus:
        with self._lock:
            return self._statuses[script_id]
