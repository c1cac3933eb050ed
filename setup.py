#!/usr/bin/env python3

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

"""Setup script for Lucky."""

import subprocess

from setuptools import find_packages, setup

# used when building outside a git repository with tags
FALLBACK_VERSION = "0.1.0"


def determine_version():
    """Get the version of Lucky.

    Examples (git describe -> python package version):
    0.1.1-0-gad012482d -> 0.1.1
    0.1.1-16-g2d8943dbc -> 0.1.1.post16+git2d8943dbc
    """
    try:
        proc = subprocess.run(
            ["git", "describe", "--tags", "--long"],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except (OSError, subprocess.CalledProcessError):
        return FALLBACK_VERSION
    desc = proc.stdout.decode().strip()

    split_desc = desc.rsplit("-", 2)
    if len(split_desc) != 3:
        return FALLBACK_VERSION
    version, distance, commit = split_desc

    if distance == "0":
        return version

    return f"{version}.post{distance}+git{commit[1:]}"


with open("README.md", encoding="utf8") as fh:
    long_description = fh.read()

install_requires = [
    "craft-cli>=2.3.0",
    "fastapi",
    "platformdirs",
    "pydantic>=2.0",
    "pyyaml",
    "requests",
    "requests-unixsocket>=0.4.0",
    "uvicorn",
    "anyio>=4.0",
]

lint_requires = [
    "black>=23.10.1,<24.0.0",
    "codespell[tomli]>=2.2.6,<3.0.0",
    "ruff~=0.1.1",
    "yamllint>=1.32.0,<2.0.0",
]

type_requires = [
    "mypy[reports]~=1.5",
    "pyright==1.1.377",
    "types-PyYAML",
    "types-requests",
    "types-setuptools",
]

dev_requires = [
    "coverage",
    "httpx",
    "pytest",
    "pytest-cov",
    "pytest-mock",
    "pytest-subprocess",
    "responses",
    "tox",
]
dev_requires += lint_requires + type_requires

extras_require = {
    "dev": dev_requires,
    "lint": lint_requires,
    "type": type_requires,
}


setup(
    name="lucky",
    version=determine_version(),
    description="A per-unit daemon and command line to write Juju charms as plain scripts.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/katharostech/lucky",
    license="Apache-2.0",
    packages=find_packages(include=["lucky", "lucky.*"]),
    classifiers=[
        "Environment :: Console",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
    ],
    entry_points={
        "console_scripts": ["lucky = lucky.main:main"],
    },
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require=extras_require,
)
