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

import json
import os
import pathlib
import shutil
import tempfile
import textwrap
import types

import pytest
import responses as responses_module

from lucky import const


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Do not let the developer's (or Juju's) environment leak into the tests."""
    for name in list(os.environ):
        if name.startswith(("LUCKY_", "JUJU_")):
            monkeypatch.delenv(name)


@pytest.fixture
def charm_dir(tmp_path, monkeypatch) -> pathlib.Path:
    """An empty charm directory, set as the one to use."""
    path = tmp_path / "charm"
    path.mkdir()
    monkeypatch.setenv(const.CHARM_DIR_ENV_VAR, str(path))
    return path


@pytest.fixture
def state_dir(monkeypatch):
    """A state directory for the unit, set as the one to use.

    It is not under pytest's tmp_path because unix socket paths must be short.
    """
    path = pathlib.Path(tempfile.mkdtemp(prefix="lucky-"))
    monkeypatch.setenv(const.STATE_DIR_ENV_VAR, str(path))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def prepare_lucky_yaml(charm_dir):
    """Write the charm's lucky.yaml."""

    def helper(content: str):
        config_path = charm_dir / const.LUCKY_FILENAME
        config_path.write_text(textwrap.dedent(content))
        return config_path

    return helper


@pytest.fixture
def prepare_host_script(charm_dir):
    """Write an executable script in the charm's host scripts directory."""

    def helper(name: str, content: str):
        scripts_dir = charm_dir / const.HOST_SCRIPTS_DIRNAME
        scripts_dir.mkdir(exist_ok=True)
        script_path = scripts_dir / name
        script_path.write_text(textwrap.dedent(content))
        script_path.chmod(0o755)
        return script_path

    return helper


@pytest.fixture
def fake_status_set(tmp_path, monkeypatch):
    """Put a fake Juju 'status-set' in the PATH; return the file where it records calls."""
    bin_dir = tmp_path / "juju-bin"
    bin_dir.mkdir()
    record_path = tmp_path / "status-set.calls"
    script_path = bin_dir / "status-set"
    script_path.write_text(f'#!/bin/sh\necho "$1|$2" >> {str(record_path)!r}\n')
    script_path.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}:{os.environ.get('PATH', '')}")
    return record_path


@pytest.fixture
def responses():
    """Fake the HTTP answers of the daemon."""
    with responses_module.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def emitter(emitter):
    """Monkeypatch craft-cli's emitter fixture to easily test the JSON encoded output."""

    def assert_json_output(self, expected_content):
        """Get last output, which should be a message, and validate its content."""
        last_output = self.interactions[-1]
        output_type, raw_output = last_output.args
        assert output_type == "message", "Last command output is not 'message'"
        try:
            output_content = json.loads(raw_output)
        except json.decoder.JSONDecodeError:
            pytest.fail("Last command output is not valid JSON.")
        assert output_content == expected_content

    emitter.assert_json_output = types.MethodType(assert_json_output, emitter)
    return emitter
