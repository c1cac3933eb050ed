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

"""Lucky error classes."""

import pathlib
from typing import Any

from craft_cli import CraftError


class LuckyError(CraftError):
    """Base class for the errors that can travel from the daemon to its clients.

    Subclasses declare the ``code`` used on the wire and keep the arguments needed
    to rebuild them in ``self.data``.
    """

    code = "lucky-error"
    status_code = 500

    def __init__(self, message: str, **kwargs: Any) -> None:
        self.data: dict[str, Any] = {"message": message}
        super().__init__(message, **kwargs)

    def to_payload(self) -> dict[str, Any]:
        """Serialize the error for an HTTP error response."""
        return {
            "error": {
                "code": self.code,
                "message": str(self),
                "details": self.details,
                "data": self.data,
            }
        }


class StartupError(CraftError):
    """The daemon could not be started."""

    def __init__(self, reason: str, log_path: pathlib.Path | None = None):
        details = None if log_path is None else f"Daemon log: {str(log_path)!r}"
        super().__init__(
            f"Lucky daemon failed to start: {reason}",
            details=details,
            resolution="Check the daemon log for errors.",
        )


class AlreadyRunningError(CraftError):
    """A daemon is already running for this unit."""

    def __init__(self, pid: int | None = None):
        self.pid = pid
        where = "" if pid is None else f" (pid {pid})"
        super().__init__(
            f"Lucky daemon is already running{where}.",
            resolution="Use --ignore-already-running to treat this as success.",
            logpath_report=False,
            reportable=False,
        )


class DaemonUnreachableError(CraftError):
    """Nothing answered on the daemon's socket."""

    def __init__(self, socket_path: pathlib.Path, reason: str | None = None):
        self.socket_path = socket_path
        super().__init__(
            f"Cannot connect to the lucky daemon at {str(socket_path)!r}.",
            details=reason,
            resolution="Start it with 'lucky daemon start'.",
            reportable=False,
        )


class UnknownHookError(LuckyError):
    """No logic is registered for the requested hook."""

    code = "unknown-hook"
    status_code = 404

    def __init__(self, hook_name: str):
        self.hook_name = hook_name
        super().__init__(
            f"No logic is registered for hook {hook_name!r}.",
            resolution="Declare the hook in the charm's lucky.yaml.",
            reportable=False,
        )
        self.data = {"hook_name": hook_name}


class HookExecutionError(LuckyError):
    """The logic registered for a hook failed."""

    code = "hook-failed"

    def __init__(self, hook_name: str, reason: str, exit_code: int = 1, output: str = ""):
        self.hook_name = hook_name
        self.reason = reason
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f"Hook {hook_name!r} failed: {reason}",
            details=output or None,
            # a signal-terminated script reports a negative code
            retcode=exit_code if exit_code > 0 else 1,
            reportable=False,
        )
        self.data = {
            "hook_name": hook_name,
            "reason": reason,
            "exit_code": exit_code,
            "output": output,
        }


class JujuToolError(LuckyError):
    """A Juju hook tool could not be run."""

    code = "juju-tool-failed"

    def __init__(self, command: str, reason: str):
        self.command = command
        super().__init__(
            f"Juju hook tool {command!r} failed: {reason}",
            resolution="Hook tools are only available while Juju runs a hook.",
        )
        self.data = {"command": command, "reason": reason}


class ConfigError(LuckyError):
    """The charm's lucky.yaml is invalid."""

    code = "bad-config"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message, details=details, reportable=False)
        self.data = {"message": message, "details": details}


_WIRE_ERRORS = {
    error_class.code: error_class
    for error_class in (UnknownHookError, HookExecutionError, JujuToolError, ConfigError)
}


def error_from_payload(payload: dict[str, Any]) -> CraftError:
    """Rebuild the error serialized by the daemon.

    Unknown codes (e.g. from a newer daemon) produce a plain CraftError.
    """
    error = payload.get("error") or {}
    error_class = _WIRE_ERRORS.get(error.get("code"))
    if error_class is not None:
        try:
            return error_class(**error.get("data", {}))
        except TypeError:
            pass
    return CraftError(
        error.get("message", "Unknown error from the lucky daemon."),
        details=error.get("details"),
    )
