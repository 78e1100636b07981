# -*- Mode:Python; indent-tabs-mode:nil; tab-width:4 -*-
#
# Copyright 2025 Canonical Ltd.
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License version 3 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Build configuration.

The configuration is assembled once at startup from environment variables
and, optionally, a YAML file. Environment variables take precedence over
file entries. All required fields are checked before any work starts, and
every missing variable is reported at once.
"""

import hashlib
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
import yaml
from xdg import BaseDirectory  # type: ignore

from git_bundler import errors
from git_bundler.sources.checksum import split_checksum

logger = logging.getLogger(__name__)

APPLICATION_NAME = "git-bundler"


class LibrarySource(pydantic.BaseModel, frozen=True):
    """The upstream source archive of a dependency library."""

    model_config = pydantic.ConfigDict(extra="forbid")

    version: str
    url: str
    checksum: str | None = None
    """Optional checksum in algorithm/digest form."""

    @pydantic.field_validator("checksum")
    @classmethod
    def _validate_checksum(cls, value: str | None) -> str | None:
        if value is None:
            return value
        algorithm, hexdigest = split_checksum(value)
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"unsupported checksum algorithm {algorithm!r}")
        if not hexdigest:
            raise ValueError(f"missing digest in checksum {value!r}")
        return value


DEFAULT_LIBRARIES: Mapping[str, LibrarySource] = {
    "zlib": LibrarySource(
        version="1.2.13",
        url="https://zlib.net/zlib-1.2.13.tar.gz",
    ),
    "openssl": LibrarySource(
        version="3.1.1",
        url=(
            "https://github.com/openssl/openssl/releases/download/"
            "openssl-3.1.1/openssl-3.1.1.tar.gz"
        ),
    ),
    "curl": LibrarySource(
        version="8.1.2",
        url="https://curl.haxx.se/download/curl-8.1.2.tar.gz",
    ),
}

# Environment variable names for each configuration field.
ENVIRONMENT_VARIABLES: Mapping[str, str] = {
    "source": "SOURCE",
    "destination": "DESTINATION",
    "curl_install_dir": "CURL_INSTALL_DIR",
    "zlib_install_dir": "ZLIB_INSTALL_DIR",
    "openssl_install_dir": "OPENSSL_INSTALL_DIR",
    "target_arch": "TARGET_ARCH",
    "git_lfs_version": "GIT_LFS_VERSION",
    "manifest": "DEPENDENCIES_MANIFEST",
    "work_dir": "BUILD_WORK_DIR",
    "download_timeout": "DOWNLOAD_TIMEOUT",
    "build_timeout": "BUILD_TIMEOUT",
    "parallel_build_count": "PARALLEL_BUILD_COUNT",
}

REQUIRED_FIELDS = (
    "source",
    "destination",
    "curl_install_dir",
    "zlib_install_dir",
    "openssl_install_dir",
    "target_arch",
)


def _default_work_dir() -> Path:
    return Path(tempfile.gettempdir(), APPLICATION_NAME)


def _default_cache_dir() -> Path:
    return Path(BaseDirectory.save_cache_path(APPLICATION_NAME))


def _default_parallel_build_count() -> int:
    return os.cpu_count() or 1


class BuildConfig(pydantic.BaseModel, frozen=True):
    """The validated, immutable configuration of a pipeline run."""

    model_config = pydantic.ConfigDict(
        extra="forbid",
        alias_generator=lambda s: s.replace("_", "-"),
        populate_by_name=True,
    )

    source: Path
    destination: Path
    curl_install_dir: Path
    zlib_install_dir: Path
    openssl_install_dir: Path
    target_arch: str
    git_lfs_version: str | None = None
    manifest: Path = Path("dependencies.json")
    work_dir: Path = pydantic.Field(default_factory=_default_work_dir)
    cache_dir: Path = pydantic.Field(default_factory=_default_cache_dir)
    download_timeout: float = pydantic.Field(default=600.0, gt=0)
    build_timeout: float = pydantic.Field(default=3600.0, gt=0)
    parallel_build_count: int = pydantic.Field(
        default_factory=_default_parallel_build_count, ge=1
    )
    libraries: dict[str, LibrarySource] = pydantic.Field(
        default_factory=lambda: dict(DEFAULT_LIBRARIES)
    )

    @pydantic.field_validator("libraries", mode="after")
    @classmethod
    def _merge_default_libraries(
        cls, value: dict[str, LibrarySource]
    ) -> dict[str, LibrarySource]:
        unknown = set(value) - set(DEFAULT_LIBRARIES)
        if unknown:
            raise ValueError(f"unknown libraries: {', '.join(sorted(unknown))}")
        return {**DEFAULT_LIBRARIES, **value}

    @property
    def install_dirs(self) -> dict[str, Path]:
        """The install prefix of each dependency library."""
        return {
            "zlib": self.zlib_install_dir,
            "openssl": self.openssl_install_dir,
            "curl": self.curl_install_dir,
        }


def load_config(
    environ: Mapping[str, str], *, config_file: Path | None = None
) -> BuildConfig:
    """Assemble the build configuration.

    :param environ: The environment variables to read.
    :param config_file: An optional YAML file with configuration entries.

    :return: The validated configuration.

    :raise ConfigurationError: If required fields are missing or values are invalid.
    :raise OSError: If the configuration file cannot be read.
    """
    data: dict[str, Any] = {}
    if config_file:
        data.update(_load_config_file(config_file))

    for field, variable in ENVIRONMENT_VARIABLES.items():
        value = environ.get(variable)
        # an empty variable counts as unset
        if value:
            data[field] = value

    missing = [
        ENVIRONMENT_VARIABLES[field] for field in REQUIRED_FIELDS if not data.get(field)
    ]
    if missing:
        raise errors.ConfigurationError(missing=missing)

    try:
        config = BuildConfig.model_validate(data)
    except pydantic.ValidationError as err:
        raise errors.ConfigurationError(invalid=_format_errors(err)) from err

    logger.debug("build configuration: %r", config)
    return config


def _load_config_file(config_file: Path) -> dict[str, Any]:
    with config_file.open() as file:
        try:
            content = yaml.safe_load(file)
        except yaml.YAMLError as err:
            raise errors.ConfigurationError(
                invalid=[f"{str(config_file)!r} is not valid YAML"]
            ) from err

    if content is None:
        return {}

    if not isinstance(content, dict):
        raise errors.ConfigurationError(
            invalid=[f"{str(config_file)!r} must contain a mapping"]
        )

    return {str(key).replace("-", "_"): value for key, value in content.items()}


def _format_errors(err: pydantic.ValidationError) -> list[str]:
    formatted: list[str] = []
    for error in err.errors():
        loc = error.get("loc", ())
        msg = error.get("msg", "invalid value")
        field = str(loc[0]).replace("-", "_") if loc else ""
        name = ENVIRONMENT_VARIABLES.get(field, ".".join(str(p) for p in loc))
        formatted.append(f"{msg} in {name!r}" if name else msg)
    return formatted
