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

"""Talk to the unit's daemon, starting it when needed."""

import os
import pathlib
import subprocess
import sys
import time
import urllib.parse
from collections.abc import Mapping
from typing import Any

import requests
import requests_unixsocket  # type: ignore[import-untyped]
from craft_cli import CraftError, emit

from lucky import const, env
from lucky.errors import (
    AlreadyRunningError,
    DaemonUnreachableError,
    StartupError,
    error_from_payload,
)
from lucky.hooks import HookResult
from lucky.lock import is_lock_held
from lucky.status import ScriptStatus


class DaemonClient:
    """Functionality to interact with the unit's daemon over its unix socket."""

    def __init__(self, socket_path: pathlib.Path | None = None):
        self.socket_path = socket_path if socket_path is not None else env.get_socket_path()
        self.base_url = "http+unix://" + urllib.parse.quote(str(self.socket_path), safe="")
        self.session = requests_unixsocket.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self.base_url + path
        emit.trace(f"Daemon request: {method} {path}")
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as exc:
            raise DaemonUnreachableError(self.socket_path, str(exc)) from exc

        if response.ok:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and "error" in payload:
            raise error_from_payload(payload)
        raise CraftError(
            f"Unexpected response from the lucky daemon (status {response.status_code}).",
            details=response.text,
        )

    def get_info(self) -> dict[str, Any]:
        """Get the daemon's description (pid, unit, running hook, status)."""
        return self._request("GET", "/status")

    def is_alive(self) -> bool:
        """Tell if the daemon answers requests."""
        try:
            self.get_info()
        except DaemonUnreachableError:
            return False
        return True

    def trigger_hook(
        self, hook_name: str, environment: Mapping[str, str] | None = None
    ) -> HookResult:
        """Run the hook in the daemon and wait for it to finish.

        The hook runs with the given environment, by default the one of this process.
        """
        if environment is None:
            environment = os.environ
        path = "/hooks/" + urllib.parse.quote(hook_name, safe="")
        result = self._request("POST", path, json={"environment": dict(environment)})
        return HookResult(**result)

    def set_status(
        self,
        script_id: str,
        status: ScriptStatus,
        environment: Mapping[str, str] | None = None,
    ) -> ScriptStatus:
        """Set a script's status; return the consolidated status of the unit."""
        if environment is None:
            environment = os.environ
        body = {
            "script_id": script_id,
            "state": str(status.state),
            "message": status.message,
            "environment": dict(environment),
        }
        return ScriptStatus.model_validate(self._request("POST", "/status", json=body))

    def stop(self) -> None:
        """Ask the daemon to shut down."""
        self._request("POST", "/stop")


def _spawn_daemon(charm_dir: pathlib.Path, state_dir: pathlib.Path) -> subprocess.Popen:
    """Run the daemon process, detached from this one."""
    cmd = [
        sys.executable,
        "-m",
        "lucky.daemon",
        "--charm-dir",
        str(charm_dir),
        "--state-dir",
        str(state_dir),
        "--log-level",
        str(env.get_daemon_log_level()),
    ]
    # the silence asked for the command line must not reach the daemon
    daemon_env = os.environ.copy()
    daemon_env.pop(const.LOG_LEVEL_ENV_VAR, None)

    log_path = env.get_daemon_log_path(state_dir)
    emit.debug(f"Spawning daemon: {cmd}")
    try:
        with log_path.open("ab") as log_file:
            return subprocess.Popen(
                cmd,
                cwd=charm_dir,
                env=daemon_env,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
    except OSError as exc:
        raise StartupError(f"cannot spawn the daemon process: {exc}", log_path) from exc


def start_daemon(
    ignore_already_running: bool = False,
    *,
    charm_dir: pathlib.Path | None = None,
    state_dir: pathlib.Path | None = None,
    timeout: float | None = None,
) -> int:
    """Start the unit's daemon and wait until it accepts requests.

    :returns: the pid of the running daemon.

    :raises AlreadyRunningError: if a daemon was already running for the unit, unless
        ignore_already_running is set.
    :raises StartupError: if the daemon could not be started.
    """
    state_dir = state_dir if state_dir is not None else env.get_state_dir()
    charm_dir = charm_dir if charm_dir is not None else env.get_charm_dir()
    state_dir.mkdir(parents=True, exist_ok=True)
    timeout = timeout if timeout is not None else env.get_start_timeout()
    log_path = env.get_daemon_log_path(state_dir)
    client = DaemonClient(env.get_socket_path(state_dir))

    # a held lock means a daemon is running, or about to
    if is_lock_held(env.get_lock_path(state_dir)):
        emit.debug("Daemon lock is held, waiting for the daemon to answer")
        proc = None
    else:
        emit.progress("Starting lucky daemon")
        proc = _spawn_daemon(charm_dir, state_dir)

    deadline = time.monotonic() + timeout
    while True:
        try:
            info = client.get_info()
        except DaemonUnreachableError:
            info = None

        if info is not None:
            pid = info.get("pid")
            if proc is not None and pid == proc.pid:
                emit.debug(f"Lucky daemon started (pid {pid})")
                return pid
            if ignore_already_running:
                emit.debug(f"Lucky daemon already running (pid {pid})")
                return pid
            raise AlreadyRunningError(pid)

        # a daemon that lost the race for the lock exits; the winner will answer
        if proc is not None and proc.poll() is not None:
            if proc.returncode != const.DAEMON_EXIT_ALREADY_RUNNING:
                raise StartupError(f"daemon exited with status {proc.returncode}", log_path)

        if time.monotonic() > deadline:
            if proc is not None and proc.poll() is None:
                proc.terminate()
            raise StartupError(f"daemon not ready after {timeout} seconds", log_path)
        time.sleep(const.START_POLL_INTERVAL)


def stop_daemon(
    *, state_dir: pathlib.Path | None = None, timeout: float | None = None
) -> None:
    """Stop the unit's daemon and wait until it is gone.

    The daemon lets the running hook finish before stopping, so by default there is
    no limit to the wait.

    :raises DaemonUnreachableError: if no daemon is running.
    """
    state_dir = state_dir if state_dir is not None else env.get_state_dir()
    DaemonClient(env.get_socket_path(state_dir)).stop()

    lock_path = env.get_lock_path(state_dir)
    deadline = None if timeout is None else time.monotonic() + timeout
    while is_lock_held(lock_path):
        if deadline is not None and time.monotonic() > deadline:
            raise CraftError(f"Lucky daemon still running after {timeout} seconds.")
        time.sleep(const.START_POLL_INTERVAL)
    emit.debug("Lucky daemon stopped")


def ensure_and_trigger(
    hook_name: str,
    environment: Mapping[str, str] | None = None,
    *,
    charm_dir: pathlib.Path | None = None,
    state_dir: pathlib.Path | None = None,
) -> HookResult:
    """Make sure the unit's daemon is running, then run the hook in it."""
    state_dir = state_dir if state_dir is not None else env.get_state_dir()
    start_daemon(ignore_already_running=True, charm_dir=charm_dir, state_dir=state_dir)
    return DaemonClient(env.get_socket_path(state_dir)).trigger_hook(hook_name, environment)
