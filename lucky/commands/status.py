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

"""Infrastructure for the 'set-status' command."""

import os
import textwrap

from craft_cli import ArgumentParsingError, emit

from lucky import client, const, env
from lucky.cmdbase import BaseCommand
from lucky.status import ScriptStatus


class SetStatusCommand(BaseCommand):
    """Set the status of the running script."""

    name = "set-status"
    help_msg = "Set the status of the running script"
    overview = textwrap.dedent(
        f"""
        Set the status of the script being run by the lucky daemon.

        Each script has its own status. The unit's status shown by Juju
        combines them: the most severe state wins (from lowest to highest:
        active, waiting, maintenance, blocked) and the messages of all the
        scripts are joined.

        The script is identified by the {const.SCRIPT_ID_ENV_VAR} environment
        variable the daemon sets when running it; use --script-id to set the
        status on behalf of another script.
    """
    )

    def fill_parser(self, parser):
        """Add own parameters to the general parser."""
        parser.add_argument(
            "state",
            choices=[str(state) for state in const.ScriptState],
            help="The state of the script",
        )
        parser.add_argument("message", nargs="?", help="A message to show with the state")
        parser.add_argument(
            "--script-id",
            default=os.getenv(const.SCRIPT_ID_ENV_VAR),
            help=f"The script to set the status for (defaults to ${const.SCRIPT_ID_ENV_VAR})",
        )

    def run(self, parsed_args):
        """Run the command."""
        if not parsed_args.script_id:
            raise ArgumentParsingError(
                "No script to set the status for: use --script-id or run from a lucky script."
            )
        status = ScriptStatus(state=const.ScriptState(parsed_args.state), message=parsed_args.message)
        consolidated = client.DaemonClient(env.get_socket_path()).set_status(
            parsed_args.script_id, status
        )
        emit.debug(f"Unit status is now {consolidated}")
