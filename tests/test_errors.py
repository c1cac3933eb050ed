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

import pathlib

import pytest
from craft_cli import CraftError

from lucky.errors import (
    AlreadyRunningError,
    ConfigError,
    DaemonUnreachableError,
    HookExecutionError,
    JujuToolError,
    StartupError,
    UnknownHookError,
    error_from_payload,
)


def test_startup_error():
    err = StartupError("daemon exited with status 1", pathlib.Path("/tmp/daemon.log"))

    assert str(err) == "Lucky daemon failed to start: daemon exited with status 1"
    assert err.details == "Daemon log: '/tmp/daemon.log'"
    assert err.retcode == 1


def test_already_running_error():
    err = AlreadyRunningError(1234)

    assert str(err) == "Lucky daemon is already running (pid 1234)."
    assert err.pid == 1234
    assert "--ignore-already-running" in err.resolution


def test_daemon_unreachable_error():
    err = DaemonUnreachableError(pathlib.Path("/tmp/daemon.sock"), "Connection refused")

    assert str(err) == "Cannot connect to the lucky daemon at '/tmp/daemon.sock'."
    assert err.details == "Connection refused"


@pytest.mark.parametrize(("exit_code", "retcode"), [(3, 3), (1, 1), (-9, 1)])
def test_hook_execution_error_retcode(exit_code, retcode):
    err = HookExecutionError("install", "boom", exit_code=exit_code)

    assert err.retcode == retcode
    assert err.exit_code == exit_code


def test_hook_execution_error_output_in_details():
    err = HookExecutionError("install", "boom", exit_code=2, output="some output\n")

    assert str(err) == "Hook 'install' failed: boom"
    assert err.details == "some output\n"
    assert err.reason == "boom"


@pytest.mark.parametrize(
    "error",
    [
        UnknownHookError("install"),
        HookExecutionError("config-changed", "script failed", exit_code=7, output="oops\n"),
        JujuToolError("status-set", "command not found"),
        ConfigError("Invalid lucky.yaml.", details="Bad lucky.yaml content:"),
    ],
)
def test_error_payload_rebuilt(error):
    rebuilt = error_from_payload(error.to_payload())

    assert type(rebuilt) is type(error)
    assert str(rebuilt) == str(error)
    assert rebuilt.details == error.details
    assert rebuilt.retcode == error.retcode


def test_error_payload_status_codes():
    assert UnknownHookError("install").status_code == 404
    assert HookExecutionError("install", "boom").status_code == 500


def test_error_payload_unknown_code():
    payload = {"error": {"code": "from-the-future", "message": "Weird.", "details": "more"}}

    rebuilt = error_from_payload(payload)

    assert type(rebuilt) is CraftError
    assert str(rebuilt) == "Weird."
    assert rebuilt.details == "more"


def test_error_payload_bad_data():
    payload = {"error": {"code": "unknown-hook", "message": "No logic.", "data": {"foo": 1}}}

    rebuilt = error_from_payload(payload)

    assert type(rebuilt) is CraftError
    assert str(rebuilt) == "No logic."
