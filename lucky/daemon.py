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

"""The lucky daemon.

This is a standalone process, one per unit, spawned by 'lucky daemon start'. It
holds the unit's liveness lock for its whole life, serves requests over a unix
socket and runs the hooks one at a time.
"""

import argparse
import dataclasses
import logging
import os
import pathlib
import sys
import threading
from collections.abc import Callable, Mapping

import anyio
import anyio.to_thread
import pydantic
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lucky import __version__, config, const, env, logsetup
from lucky.errors import LuckyError
from lucky.hooks import HookContext, HookRegistry, HookResult
from lucky.lock import DaemonLock, read_lock_pid
from lucky.status import ScriptStatus, StatusBoard

logger = logging.getLogger(__name__)


class Daemon:
    """Everything the daemon owns: the dispatch table and the scripts' statuses."""

    def __init__(
        self,
        charm_dir: pathlib.Path,
        state_dir: pathlib.Path,
        registry: HookRegistry | None = None,
    ):
        self.charm_dir = charm_dir
        self.state_dir = state_dir
        self.registry = registry if registry is not None else HookRegistry()
        self.statuses = StatusBoard()
        self.running_hook: str | None = None
        self.on_stop: Callable[[], None] | None = None
        self._hook_lock = threading.Lock()

    def trigger_hook(
        self, hook_name: str, environment: Mapping[str, str] | None = None
    ) -> HookResult:
        """Run the logic registered for the hook.

        Only one hook runs at a time; concurrent requests wait for their turn.
        """
        logger.info("Triggering hook: %s", hook_name)
        with self._hook_lock:
            self.registry.load_config(config.load(self.charm_dir))
            context = HookContext(
                hook_name=hook_name,
                charm_dir=self.charm_dir,
                state_dir=self.state_dir,
                environment=dict(environment or {}),
            )
            self.running_hook = hook_name
            try:
                result = self.registry.run(context)
            except LuckyError as exc:
                logger.error("%s\n    Did not complete hook: %r", exc, hook_name)
                raise
            finally:
                self.running_hook = None
        logger.info("Hook %r done", hook_name)
        return result

    def set_status(
        self, script_id: str, status: ScriptStatus, environment: Mapping[str, str]
    ) -> ScriptStatus:
        """Store a script's status and update the unit's Juju status."""
        return self.statuses.set(script_id, status, environment)

    def get_info(self) -> dict:
        """Describe the daemon."""
        return {
            "pid": os.getpid(),
            "unit": env.get_unit_name(),
            "version": __version__,
            "charm_dir": str(self.charm_dir),
            "running_hook": self.running_hook,
            "status": self.statuses.get().model_dump(mode="json"),
        }

    def request_stop(self) -> None:
        """Ask the server to shut down once the in-flight requests are done."""
        logger.info("Shutting down server")
        if self.on_stop is not None:
            self.on_stop()


class TriggerHookRequest(pydantic.BaseModel):
    """Body of the trigger hook request."""

    environment: dict[str, str] = {}


class SetStatusRequest(pydantic.BaseModel):
    """Body of the set status request."""

    script_id: str
    state: const.ScriptState = const.ScriptState.ACTIVE
    message: str | None = None
    environment: dict[str, str] = {}


def create_app(daemon: Daemon) -> FastAPI:
    """Build the HTTP application exposing the daemon."""
    app = FastAPI(title="lucky daemon", version=__version__, docs_url=None, redoc_url=None)

    @app.exception_handler(LuckyError)
    async def _lucky_error_handler(request: Request, exc: LuckyError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    # queued hooks wait on an async lock, so they do not hold the threadpool
    # the running hook needs for its own requests
    hook_queue = anyio.Lock()

    @app.get("/status")
    def get_status() -> dict:
        return daemon.get_info()

    @app.post("/hooks/{hook_name}")
    async def trigger_hook(hook_name: str, request: TriggerHookRequest | None = None) -> dict:
        environment = request.environment if request is not None else {}
        async with hook_queue:
            result = await anyio.to_thread.run_sync(daemon.trigger_hook, hook_name, environment)
        return dataclasses.asdict(result)

    @app.post("/status")
    def set_status(request: SetStatusRequest) -> dict:
        status = ScriptStatus(state=request.state, message=request.message)
        consolidated = daemon.set_status(request.script_id, status, request.environment)
        return consolidated.model_dump(mode="json")

    @app.post("/stop")
    def stop() -> dict:
        daemon.request_stop()
        return {"stopping": True}

    return app


def serve(daemon: Daemon, socket_path: pathlib.Path) -> None:
    """Serve the daemon on the unix socket until asked to stop."""
    server_config = uvicorn.Config(
        create_app(daemon),
        uds=str(socket_path),
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(server_config)

    def _stop():
        server.should_exit = True

    daemon.on_stop = _stop
    logger.info("Listening on %r", str(socket_path))
    server.run()


def run_daemon(
    charm_dir: pathlib.Path, state_dir: pathlib.Path, log_level: const.LogLevel
) -> int:
    """Run the daemon for the unit; return the process exit code."""
    state_dir.mkdir(parents=True, exist_ok=True)
    log_handler = logsetup.configure(env.get_daemon_log_path(state_dir), log_level)
    lock = DaemonLock(env.get_lock_path(state_dir))
    socket_path = env.get_socket_path(state_dir)
    try:
        if not lock.acquire(timeout=const.DAEMON_LOCK_TIMEOUT):
            pid = read_lock_pid(lock.path)
            logger.error("Another daemon (pid %s) is running for this unit", pid)
            return const.DAEMON_EXIT_ALREADY_RUNNING

        # a socket left behind by a crashed daemon
        socket_path.unlink(missing_ok=True)
        daemon = Daemon(charm_dir=charm_dir, state_dir=state_dir)
        try:
            serve(daemon, socket_path)
        finally:
            socket_path.unlink(missing_ok=True)
            lock.release()
        logger.info("Daemon stopped")
        return 0
    finally:
        logsetup.unconfigure(log_handler)


def _parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lucky.daemon")
    parser.add_argument(
        "--charm-dir",
        required=True,
        type=pathlib.Path,
        help="The directory of the charm the hooks belong to.",
    )
    parser.add_argument(
        "--state-dir",
        required=True,
        type=pathlib.Path,
        help="The directory for the unit's socket, lock and log.",
    )
    parser.add_argument(
        "--log-level",
        default=const.LogLevel.INFO,
        type=const.LogLevel,
        choices=list(const.LogLevel),
        help="The level of the messages sent to the daemon log.",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Run the daemon process."""
    options = _parse_arguments(argv)
    sys.exit(run_daemon(options.charm_dir, options.state_dir, options.log_level))


if __name__ == "__main__":
    main()
