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

from lucky import const, env


def test_get_unit_name_from_juju(monkeypatch):
    monkeypatch.setenv(const.JUJU_UNIT_NAME_ENV_VAR, "postgresql/0")

    assert env.get_unit_name() == "postgresql/0"


def test_get_unit_name_default():
    assert env.get_unit_name() == const.DEFAULT_UNIT_NAME


@pytest.mark.parametrize("env_var", [const.CHARM_DIR_ENV_VAR, const.JUJU_CHARM_DIR_ENV_VAR])
def test_get_charm_dir_from_environment(monkeypatch, tmp_path, env_var):
    monkeypatch.setenv(env_var, str(tmp_path))

    assert env.get_charm_dir() == tmp_path.resolve()


def test_get_charm_dir_lucky_overrides_juju(monkeypatch, tmp_path):
    monkeypatch.setenv(const.JUJU_CHARM_DIR_ENV_VAR, str(tmp_path / "juju"))
    monkeypatch.setenv(const.CHARM_DIR_ENV_VAR, str(tmp_path / "lucky"))

    assert env.get_charm_dir() == (tmp_path / "lucky").resolve()


def test_get_charm_dir_default(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    assert env.get_charm_dir() == pathlib.Path.cwd()


def test_get_state_dir_from_environment(monkeypatch, tmp_path):
    state_dir = tmp_path / "some" / "state"
    monkeypatch.setenv(const.STATE_DIR_ENV_VAR, str(state_dir))

    assert env.get_state_dir() == state_dir.resolve()
    assert not state_dir.exists()


def test_get_state_dir_per_unit(monkeypatch, tmp_path):
    monkeypatch.setenv(const.JUJU_UNIT_NAME_ENV_VAR, "postgresql/0")
    monkeypatch.setattr(env.platformdirs, "user_state_path", lambda appname: tmp_path / appname)

    assert env.get_state_dir() == tmp_path / "lucky" / "postgresql-0"


def test_state_files_paths(tmp_path):
    assert env.get_socket_path(tmp_path) == tmp_path / "daemon.sock"
    assert env.get_lock_path(tmp_path) == tmp_path / "daemon.lock"
    assert env.get_daemon_log_path(tmp_path) == tmp_path / "daemon.log"


def test_state_files_paths_default(state_dir):
    assert env.get_socket_path() == state_dir.resolve() / "daemon.sock"


@pytest.mark.parametrize(
    ("value", "result"),
    [
        (None, const.LogLevel.INFO),
        ("off", const.LogLevel.OFF),
        ("error", const.LogLevel.ERROR),
        ("DEBUG", const.LogLevel.DEBUG),
        (" trace ", const.LogLevel.TRACE),
    ],
)
def test_get_log_level(monkeypatch, value, result):
    if value is not None:
        monkeypatch.setenv(const.LOG_LEVEL_ENV_VAR, value)

    assert env.get_log_level() == result


def test_get_log_level_invalid(monkeypatch):
    monkeypatch.setenv(const.LOG_LEVEL_ENV_VAR, "loud")

    with pytest.raises(CraftError) as cm:
        env.get_log_level()
    assert str(cm.value) == "Invalid value 'loud' in LUCKY_LOG_LEVEL."
    assert "'off'" in cm.value.resolution


def test_get_daemon_log_level_independent(monkeypatch):
    monkeypatch.setenv(const.LOG_LEVEL_ENV_VAR, "off")

    assert env.get_daemon_log_level() == const.LogLevel.INFO


def test_get_start_timeout_default():
    assert env.get_start_timeout() == const.DEFAULT_START_TIMEOUT


def test_get_start_timeout_from_environment(monkeypatch):
    monkeypatch.setenv(const.START_TIMEOUT_ENV_VAR, "2.5")

    assert env.get_start_timeout() == 2.5


@pytest.mark.parametrize("value", ["soon", "0", "-1"])
def test_get_start_timeout_invalid(monkeypatch, value):
    monkeypatch.setenv(const.START_TIMEOUT_ENV_VAR, value)

    with pytest.raises(CraftError):
        env.get_start_timeout()
