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

"""Hook dispatch: what runs when a hook is triggered.

Two kinds of handlers live in the dispatch table:

- the scripts declared for the hook in the charm's lucky.yaml, which are
  reloaded every time the configuration is loaded

- Python callables registered directly, which receive a HookContext and may
  return some text to add to the hook's output

Handlers run in order (scripts first); the first failure stops the hook.
"""

import dataclasses
import logging
import pathlib
import subprocess
from collections.abc import Callable, Mapping

from lucky import const
from lucky.config import HookScript, LuckyConfig
from lucky.errors import HookExecutionError, UnknownHookError

logger = logging.getLogger(__name__)

SHELL = "/bin/sh"


@dataclasses.dataclass(frozen=True)
class HookContext:
    """What a handler gets to know about the hook being run."""

    hook_name: str
    charm_dir: pathlib.Path
    state_dir: pathlib.Path
    environment: Mapping[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class HookResult:
    """The outcome of a successful hook execution."""

    hook_name: str
    exit_code: int = 0
    output: str = ""


HookHandler = Callable[[HookContext], str | None]


class ScriptHandler:
    """Run one of the hook scripts declared in lucky.yaml."""

    def __init__(self, hook_name: str, index: int, script: HookScript):
        self.hook_name = hook_name
        self.index = index
        self.script = script

    def __repr__(self) -> str:
        return f"<ScriptHandler {self.script_id!r} for hook {self.hook_name!r}>"

    @property
    def script_id(self) -> str:
        """Identify the script when it reports its status."""
        if self.script.host_script is not None:
            return self.script.host_script
        return f"{self.hook_name}-inline-{self.index}"

    def get_command(self, charm_dir: pathlib.Path) -> list[str]:
        """Build the command line to run the script."""
        if self.script.host_script is None:
            return [SHELL, "-c", self.script.inline_host_script]
        script_path = charm_dir / const.HOST_SCRIPTS_DIRNAME / self.script.host_script
        if not script_path.is_file():
            raise HookExecutionError(self.hook_name, f"host script {str(script_path)!r} not found")
        return [str(script_path), *self.script.args]

    def __call__(self, context: HookContext) -> str:
        cmd = self.get_command(context.charm_dir)
        env = dict(context.environment)
        env[const.HOOK_NAME_ENV_VAR] = context.hook_name
        env[const.SCRIPT_ID_ENV_VAR] = self.script_id
        env[const.STATE_DIR_ENV_VAR] = str(context.state_dir)

        logger.info("Running script %r", self.script_id)
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=context.charm_dir,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise HookExecutionError(
                context.hook_name, f"cannot run script {self.script_id!r}: {exc}"
            ) from exc

        lines = []
        try:
            for line in proc.stdout:
                logger.info("   :: %s", line.rstrip())
                lines.append(line)
            retcode = proc.wait()
        finally:
            # never leave the script behind once the hook is over
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdout.close()

        output = "".join(lines)
        if retcode:
            raise HookExecutionError(
                context.hook_name,
                f"script {self.script_id!r} exited with status {retcode}",
                exit_code=retcode,
                output=output,
            )
        return output


class HookRegistry:
    """The dispatch table from hook names to their handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[HookHandler]] = {}
        self._script_handlers: dict[str, list[ScriptHandler]] = {}

    def register(self, hook_name: str, handler: HookHandler) -> None:
        """Register a Python callable to run when the hook fires."""
        if not const.HOOK_NAME_REGEX.match(hook_name):
            raise ValueError(f"Bad hook name {hook_name!r}")
        self._handlers.setdefault(hook_name, []).append(handler)

    def load_config(self, config: LuckyConfig) -> None:
        """Replace the script handlers with the ones declared in the config."""
        self._script_handlers = {
            hook_name: [
                ScriptHandler(hook_name, index, script) for index, script in enumerate(scripts)
            ]
            for hook_name, scripts in config.hooks.items()
        }

    def get_handlers(self, hook_name: str) -> list[HookHandler]:
        """Return all the handlers for the hook, in execution order."""
        return [*self._script_handlers.get(hook_name, []), *self._handlers.get(hook_name, [])]

    @property
    def hook_names(self) -> list[str]:
        """All the hooks with some logic registered."""
        names = set(self._handlers) | {name for name, h in self._script_handlers.items() if h}
        return sorted(names)

    def __contains__(self, hook_name: str) -> bool:
        return bool(self.get_handlers(hook_name))

    def run(self, context: HookContext) -> HookResult:
        """Run all the handlers for the hook.

        :raises UnknownHookError: if nothing is registered for the hook; nothing is run.
        :raises HookExecutionError: when a handler fails; the following ones are not run.
        """
        handlers = self.get_handlers(context.hook_name)
        if not handlers:
            raise UnknownHookError(context.hook_name)

        outputs = []
        for handler in handlers:
            try:
                output = handler(context)
            except HookExecutionError as exc:
                if not outputs:
                    raise
                raise HookExecutionError(
                    exc.hook_name,
                    exc.reason,
                    exit_code=exc.exit_code,
                    output="".join(outputs) + exc.output,
                ) from exc
            except Exception as exc:
                logger.exception("Handler %r failed", handler)
                raise HookExecutionError(
                    context.hook_name, f"{exc!r}", output="".join(outputs)
                ) from exc
            if output:
                outputs.append(output)
        return HookResult(hook_name=context.hook_name, output="".join(outputs))
