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

"""Module for helping with creating the hook scripts Juju runs for a charm."""

import pathlib
from collections.abc import Iterable

from craft_cli import emit

from lucky import const

HOOK_SCRIPT_TEMPLATE = """\
#!/bin/bash
set -e # Exit immediately if a command fails

# The daemon will handle logging so we make these silent to avoid duplicate
# messages.
export {log_level_env_var}=off
./bin/lucky daemon start --ignore-already-running
./bin/lucky daemon trigger-hook {hook_name}
"""


def render_hook_script(hook_name: str) -> str:
    """Return the content of the script Juju runs for the hook."""
    if not const.HOOK_NAME_REGEX.match(hook_name):
        raise ValueError(f"Bad hook name {hook_name!r}")
    return HOOK_SCRIPT_TEMPLATE.format(
        hook_name=hook_name, log_level_env_var=const.LOG_LEVEL_ENV_VAR
    )


def create_hook_scripts(
    *, charm_dir: pathlib.Path, hook_names: Iterable[str]
) -> list[pathlib.Path]:
    """Write one executable hook script per hook in the charm's hooks directory.

    Existing scripts with the same name are replaced.

    :param charm_dir: the charm directory to create the scripts in.
    :returns: the paths of the written scripts.
    """
    hooks_path = charm_dir / const.HOOKS_DIRNAME
    hooks_path.mkdir(parents=True, exist_ok=True)

    written = []
    for hook_name in sorted(set(hook_names)):
        script_path = hooks_path / hook_name
        emit.progress(f"Creating hook script {str(script_path)!r}")
        script_path.write_text(render_hook_script(hook_name))
        script_path.chmod(mode=0o755)
        written.append(script_path)

    return written
