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

"""Charm configuration management.

Using pydantic's BaseModel, this module supports the translation of the
charm's lucky.yaml to a python object.

Configuration Schema
====================

hooks:
  <hook-name>: [list of hook scripts] run in order when the hook fires


Object Definitions
==================

HookScript
**********

Object with exactly one of the following properties:
- host-script: [string] name of an executable file in the charm's host_scripts dir
- inline-host-script: [string] shell code run with /bin/sh

and optionally:
- args: [list of strings] arguments for the host-script
"""

import logging
import pathlib
from typing import Annotated, Any

import pydantic
import yaml

from lucky import const
from lucky.errors import ConfigError
from lucky.format import format_pydantic_errors

logger = logging.getLogger(__name__)


def _validate_hook_name(value: str) -> str:
    if not const.HOOK_NAME_REGEX.match(value):
        raise ValueError(f"Bad hook name {value!r}")
    return value


HookName = Annotated[str, pydantic.AfterValidator(_validate_hook_name)]


class ModelConfigDefaults(
    pydantic.BaseModel,
    extra="forbid",
    frozen=True,
    populate_by_name=True,
    alias_generator=lambda s: s.replace("_", "-"),
):
    """Define lucky's defaults for the BaseModel configuration."""


class HookScript(ModelConfigDefaults):
    """A script to run when a hook fires."""

    host_script: str | None = None
    inline_host_script: str | None = None
    args: list[str] = []

    @pydantic.model_validator(mode="after")
    def _check_exactly_one_script(self):
        if (self.host_script is None) == (self.inline_host_script is None):
            raise ValueError("exactly one of 'host-script' or 'inline-host-script' is needed")
        if self.args and self.host_script is None:
            raise ValueError("'args' can only be used with 'host-script'")
        return self

    @pydantic.field_validator("host_script")
    @classmethod
    def _check_host_script_name(cls, value: str | None) -> str | None:
        if value is not None and (not value or "/" in value or value in (".", "..")):
            raise ValueError(f"Bad host script name {value!r}")
        return value


class LuckyConfig(ModelConfigDefaults):
    """Object representing lucky.yaml contents."""

    hooks: dict[HookName, list[HookScript]] = {}

    @classmethod
    def unmarshal(cls, obj: dict[str, Any] | None):
        """Unmarshal object with necessary translations and error handling.

        :returns: valid LuckyConfig.

        :raises ConfigError: On failure to unmarshal object.
        """
        if obj is None:
            obj = {}
        elif not isinstance(obj, dict):
            raise ConfigError(f"Bad {const.LUCKY_FILENAME} content: a mapping is needed.")
        try:
            return cls.model_validate(obj)
        except pydantic.ValidationError as error:
            raise ConfigError(
                f"Invalid {const.LUCKY_FILENAME}.",
                details=format_pydantic_errors(error.errors()),
            ) from error


def load(charm_dir: pathlib.Path) -> LuckyConfig:
    """Load the charm's lucky.yaml.

    A charm without lucky.yaml has no hooks.
    """
    config_path = charm_dir / const.LUCKY_FILENAME
    if not config_path.is_file():
        logger.debug("Couldn't find config file %r", str(config_path))
        return LuckyConfig()
    try:
        with config_path.open("rt", encoding="utf8") as fh:
            content = yaml.safe_load(fh)
    except (yaml.error.YAMLError, OSError) as err:
        raise ConfigError(f"Cannot read {str(config_path)!r}.", details=str(err)) from err
    return LuckyConfig.unmarshal(content)
