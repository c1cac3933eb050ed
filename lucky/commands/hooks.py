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

"""Infrastructure for the 'create-hooks' command."""

import pathlib

from craft_cli import emit

from lucky import config, const, env
from lucky.cmdbase import BaseCommand
from lucky.hookscripts import create_hook_scripts

_overview = f"""
Create the scripts Juju runs for each hook declared in the charm's {const.LUCKY_FILENAME}.

Every script makes sure the unit's lucky daemon is running and then asks
it to trigger the hook. Scripts are written in the charm's
'{const.HOOKS_DIRNAME}' directory, replacing existing ones with the same name.
"""


class CreateHooksCommand(BaseCommand):
    """Create the charm's hook scripts."""

    name = "create-hooks"
    help_msg = "Create the hook scripts for the charm"
    overview = _overview

    def fill_parser(self, parser):
        """Add own parameters to the general parser."""
        parser.add_argument(
            "--charm-dir",
            type=pathlib.Path,
            help="The charm directory (defaults to $JUJU_CHARM_DIR or current)",
        )

    def run(self, parsed_args):
        """Run the command."""
        charm_dir = parsed_args.charm_dir or env.get_charm_dir()
        lucky_config = config.load(charm_dir)
        if not lucky_config.hooks:
            emit.message(f"No hooks declared in {const.LUCKY_FILENAME}, nothing to create.")
            return

        written = create_hook_scripts(charm_dir=charm_dir, hook_names=lucky_config.hooks)
        emit.message(
            f"Created {len(written)} hook scripts in {str(charm_dir / const.HOOKS_DIRNAME)!r}."
        )
