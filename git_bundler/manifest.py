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

"""Dependency manifest definitions and helpers.

The dependency manifest is a JSON document keyed by package name. Each
package lists its release version and the prebuilt files published for
each architecture and platform::

    {
      "git-lfs": {
        "version": "v3.3.0",
        "files": [
          {"name": "git-lfs-linux-amd64-v3.3.0.tar.gz", "arch": "amd64",
           "platform": "linux", "checksum": "6a4e6bd7..."}
        ]
      }
    }
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pydantic

from git_bundler import errors

logger = logging.getLogger(__name__)


class ManifestFile(pydantic.BaseModel, frozen=True):
    """A prebuilt file published for one architecture and platform."""

    model_config = pydantic.ConfigDict(extra="ignore")

    name: str
    checksum: str
    arch: str
    platform: str


class ManifestPackage(pydantic.BaseModel, frozen=True):
    """A package entry in the dependency manifest."""

    model_config = pydantic.ConfigDict(extra="ignore")

    version: str = ""
    files: list[ManifestFile] = []

    @property
    def release_version(self) -> str:
        """The version without its leading ``v`` tag marker."""
        return self.version[1:] if self.version.startswith("v") else self.version


@dataclass(frozen=True)
class ArtifactDescriptor:
    """A resolved prebuilt artifact ready to be fetched and verified.

    :param name: The artifact file name.
    :param url: The download URL.
    :param checksum: The expected hex-encoded sha256 digest.
    :param arch: The dependency architecture tag.
    :param platform: The platform name.
    :param version: The artifact release version.
    """

    name: str
    url: str
    checksum: str
    arch: str
    platform: str
    version: str


class DependencyManifest:
    """The parsed dependency manifest.

    :param packages: Package entries keyed by package name.
    :param path: The file the manifest was loaded from, for error reporting.
    """

    def __init__(
        self, packages: dict[str, ManifestPackage], *, path: Path | None = None
    ) -> None:
        self._packages = packages
        self.path = path or Path("dependencies.json")

    @classmethod
    def unmarshal(
        cls, data: dict[str, Any], *, path: Path | None = None
    ) -> "DependencyManifest":
        """Create and populate a new manifest object from a dict.

        :param data: The dict to unmarshal.
        :param path: The file the data was loaded from.

        :raise ManifestError: If the data fails validation.
        """
        manifest_path = path or Path("dependencies.json")
        if not isinstance(data, dict):
            raise errors.ManifestError(manifest_path, "expected a JSON object")

        packages: dict[str, ManifestPackage] = {}
        for name, entry in data.items():
            try:
                packages[name] = ManifestPackage.model_validate(entry)
            except pydantic.ValidationError as err:
                raise errors.ManifestError(
                    manifest_path, f"package {name!r}: {_format_errors(err)}"
                ) from err

        return cls(packages, path=manifest_path)

    @classmethod
    def load(cls, path: Path) -> "DependencyManifest":
        """Read the manifest from a JSON file.

        :raise ManifestError: If the file cannot be read or parsed.
        """
        try:
            data = json.loads(path.read_text())
        except OSError as err:
            raise errors.ManifestError(path, err.strerror or str(err)) from err
        except json.JSONDecodeError as err:
            raise errors.ManifestError(path, f"invalid JSON ({err.msg})") from err

        return cls.unmarshal(data, path=path)

    def get_package(self, name: str) -> ManifestPackage | None:
        """Obtain the entry for the given package, if present."""
        return self._packages.get(name)

    def resolve_artifact(
        self,
        package: str,
        *,
        arch: str,
        platform: str,
        url_template: str,
        version: str | None = None,
    ) -> ArtifactDescriptor:
        """Find the file published for an architecture and platform.

        :param package: The package name.
        :param arch: The dependency architecture tag.
        :param platform: The platform name.
        :param url_template: A format string using ``{version}`` and ``{name}``.
        :param version: The release version, defaults to the manifest version.

        :raise ManifestError: If the package or a matching file is not listed.
        """
        entry = self._packages.get(package)
        if entry is None:
            raise errors.ManifestError(self.path, f"package {package!r} not listed")

        matches = [f for f in entry.files if f.arch == arch and f.platform == platform]
        if not matches:
            raise errors.ManifestError(
                self.path,
                f"no {package!r} file for arch {arch!r} and platform {platform!r}",
            )
        if len(matches) > 1:
            logger.warning(
                "Multiple %r files for %s/%s, using %r",
                package,
                arch,
                platform,
                matches[0].name,
            )

        selected = matches[0]
        release = version or entry.release_version
        return ArtifactDescriptor(
            name=selected.name,
            url=url_template.format(version=release, name=selected.name),
            checksum=selected.checksum,
            arch=arch,
            platform=platform,
            version=release,
        )


def _format_errors(err: pydantic.ValidationError) -> str:
    formatted = []
    for error in err.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        msg = error.get("msg", "invalid value")
        formatted.append(f"{msg} in field {loc!r}" if loc else msg)
    return "; ".join(formatted)
