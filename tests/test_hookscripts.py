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

import os

import pytest

from lucky import const
from lucky.hookscripts import create_hook_scripts, render_hook_script


def test_render_hook_script():
    assert render_hook_script("config-changed") == (
        "#!/bin/bash\n"
        "set -e # Exit immediately if a command fails\n"
        "\n"
        "# The daemon will handle logging so we make these silent to avoid duplicate\n"
        "# messages.\n"
        "export LUCKY_LOG_LEVEL=off\n"
        "./bin/lucky daemon start --ignore-already-running\n"
        "./bin/lucky daemon trigger-hook config-changed\n"
    )


@pytest.mark.parametrize("hook_name", ["", "Install", "install; rm -rf /", "-install"])
def test_render_hook_script_bad_name(hook_name):
    with pytest.raises(ValueError):
        render_hook_script(hook_name)


def test_create_hook_scripts(tmp_path, emitter):
    written = create_hook_scripts(charm_dir=tmp_path, hook_names=["start", "install", "start"])

    hooks_dir = tmp_path / const.HOOKS_DIRNAME
    assert written == [hooks_dir / "install", hooks_dir / "start"]
    for path in written:
        assert os.access(path, os.X_OK)
        assert path.read_text() == render_hook_script(path.name)
    emitter.assert_progress(f"Creating hook script {str(hooks_dir / 'install')!r}")


def test_create_hook_scripts_replaces_existing(tmp_path):
    hooks_dir = tmp_path / const.HOOKS_DIRNAME
    hooks_dir.mkdir()
    (hooks_dir / "install").write_text("old content")
    (hooks_dir / "other").write_text("untouched")

    create_hook_scripts(charm_dir=tmp_path, hook_names=["install"])

    assert (hooks_dir / "install").read_text() == render_hook_script("install")
    assert (hooks_dir / "other").read_text() == "untouched"
