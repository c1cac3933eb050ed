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

"""Infrastructure for the 'daemon' command."""

import textwrap

from craft_cli import ArgumentParsingError, emit

from lucky import client, env
from lucky.cmdbase import BaseCommand

START = "start"
STOP = "stop"
STATUS = "status"
TRIGGER_HOOK = "trigger-hook"
ACTIONS = (START, STOP, STATUS, TRIGGER_HOOK)


class DaemonCommand(BaseCommand):
    """Control the unit's daemon and run hooks in it."""

    name = "daemon"
    help_msg = "Start, stop or query the lucky daemon, or trigger a hook in it"
    overview = textwrap.dedent(
        """
        Control the lucky daemon of the current unit.

        There is one daemon per unit; it runs the hooks, one at a time, and
        keeps the unit's state between them. The hook scripts Juju runs use
        this command to make sure the daemon is up and then run the hook:

            lucky daemon start --ignore-already-running
            lucky daemon trigger-hook <hook-name>

        The exit code of 'trigger-hook' is the one of the failing hook
        script, so Juju sees the hook failing.

        Other actions are 'stop', to shut the daemon down once the running
        hook finishes, and 'status', to show what the daemon is doing.
    """
    )
    common = True

    def fill_parser(self, parser):
        """Add own parameters to the general parser."""
        self.include_format_option(parser)
        parser.add_argument("action", choices=ACTIONS, help="What to do with the daemon")
        parser.add_argument(
            "hook_name",
            metavar="hook-name",
            nargs="?",
            help="The hook to trigger (only for 'trigger-hook')",
        )
        parser.add_argument(
            "--ignore-already-running",
            action="store_true",
            help="Do not fail 'start' if the daemon is already running",
        )

    def run(self, parsed_args):
        """Run the command."""
        action = parsed_args.action
        if action == TRIGGER_HOOK:
            if parsed_args.hook_name is None:
                raise ArgumentParsingError("The hook name is needed to trigger a hook.")
            self._check_hook_name(parsed_args.hook_name)
        elif parsed_args.hook_name is not None:
            raise ArgumentParsingError(f"A hook name is not accepted by the {action!r} action.")

        if action == START:
            self._start(parsed_args)
        elif action == STOP:
            self._stop()
        elif action == STATUS:
            self._status(parsed_args)
        else:
            self._trigger_hook(parsed_args.hook_name)

    def _start(self, parsed_args):
        pid = client.start_daemon(ignore_already_running=parsed_args.ignore_already_running)
        emit.message(f"Lucky daemon running (pid {pid}).")

    def _stop(self):
        client.stop_daemon()
        emit.message("Lucky daemon stopped.")

    def _status(self, parsed_args):
        info = client.DaemonClient(env.get_socket_path()).get_info()
        if parsed_args.format:
            emit.message(self.format_content(parsed_args.format, info))
            return

        status = info["status"]
        status_str = status["state"]
        if status["message"]:
            status_str += f" ({status['message']})"
        lines = [
            f"Unit: {info['unit']}",
            f"Pid: {info['pid']}",
            f"Version: {info['version']}",
            f"Charm directory: {info['charm_dir']}",
            f"Running hook: {info['running_hook'] or '-'}",
            f"Status: {status_str}",
        ]
        emit.message("\n".join(lines))

    def _trigger_hook(self, hook_name):
        emit.progress(f"Triggering hook {hook_name!r}")
        result = client.DaemonClient(env.get_socket_path()).trigger_hook(hook_name)
        if result.output:
            emit.message(result.output.rstrip("\n"))
        emit.debug(f"Hook {hook_name!r} done")
