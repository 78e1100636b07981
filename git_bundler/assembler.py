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

"""Post-processing of the staging directory."""

import logging
from pathlib import Path

from git_bundler import errors, layout, sources
from git_bundler.manifest import ArtifactDescriptor, DependencyManifest
from git_bundler.toolchain import BuildTarget
from git_bundler.utils import file_utils

logger = logging.getLogger(__name__)

GIT_LFS_PACKAGE = "git-lfs"
GIT_LFS_PLATFORM = "linux"
GIT_LFS_URL_TEMPLATE = (
    "https://github.com/git-lfs/git-lfs/releases/download/v{version}/{name}"
)
GIT_LFS_EXCLUDES = ("*.sh", "*.md")

# For more information: https://curl.haxx.se/docs/caextract.html
CA_BUNDLE_URL = "https://curl.haxx.se/ca/cacert.pem"


def resolve_git_lfs_version(
    requested: str | None, manifest: DependencyManifest | None
) -> str:
    """Determine which Git LFS release to bundle.

    :param requested: An explicitly requested version, if any.
    :param manifest: The dependency manifest, if any.

    :return: The release version, or an empty string if Git LFS should
        not be bundled.
    """
    if requested:
        return requested[1:] if requested.startswith("v") else requested

    if manifest:
        package = manifest.get_package(GIT_LFS_PACKAGE)
        if package:
            return package.release_version

    return ""


class BundleAssembler:
    """Add and remove files in the staging directory after Git is installed.

    :param destination: The staging directory.
    :param target: The cross-compilation profile.
    :param work_dir: Where downloaded archives are kept.
    :param download_timeout: Seconds to wait for the download server.
    """

    def __init__(
        self,
        *,
        destination: Path,
        target: BuildTarget,
        work_dir: Path,
        download_timeout: float = sources.DEFAULT_TIMEOUT,
    ) -> None:
        self._destination = destination
        self._target = target
        self._work_dir = work_dir
        self._download_timeout = download_timeout

    def merge_git_lfs(
        self, manifest: DependencyManifest | None, *, version: str
    ) -> ArtifactDescriptor | None:
        """Download, verify and unpack Git LFS into the Git exec path.

        :param manifest: The dependency manifest listing Git LFS releases.
        :param version: The Git LFS release to bundle. Nothing is done if empty.

        :return: The bundled artifact, or None if bundling was skipped.

        :raise ManifestError: If the manifest has no matching Git LFS file.
        :raise DownloadError: If the archive cannot be downloaded.
        :raise ChecksumMismatch: If the archive doesn't match the manifest checksum.
        :raise ExtractionLayoutError: If the archive has no git-lfs executable.
        """
        if not version:
            logger.info(
                "-- Skipped bundling Git LFS "
                "(set GIT_LFS_VERSION to include it in the bundle)"
            )
            return None

        if manifest is None:
            raise errors.ManifestError(
                Path("dependencies.json"), "required to bundle Git LFS"
            )

        logger.info("-- Bundling Git LFS")
        artifact = manifest.resolve_artifact(
            GIT_LFS_PACKAGE,
            arch=self._target.dependency_arch,
            platform=GIT_LFS_PLATFORM,
            url_template=GIT_LFS_URL_TEMPLATE,
            version=version,
        )

        archive = self._work_dir / "downloads" / artifact.name
        logger.info("-- Downloading from %s", artifact.url)
        sources.fetch(artifact.url, archive, timeout=self._download_timeout)

        computed = sources.digest(archive)
        if not sources.verify(computed, artifact.checksum):
            logger.error(
                "Git LFS: expected checksum %s but got %s", artifact.checksum, computed
            )
            file_utils.unlink_quietly(archive)
            raise errors.ChecksumMismatch(
                expected=artifact.checksum, obtained=computed, name=artifact.name
            )

        logger.info("Git LFS: checksums match")

        exec_path = self._destination / layout.EXEC_PATH
        sources.extract_tarball(
            archive, exec_path, strip_components=1, exclude=GIT_LFS_EXCLUDES
        )

        git_lfs = self._destination / layout.GIT_LFS_EXECUTABLE
        if not git_lfs.is_file():
            raise errors.ExtractionLayoutError(
                archive=artifact.name, expected=Path(layout.GIT_LFS_EXECUTABLE)
            )

        return artifact

    def add_ca_bundle(self) -> Path:
        """Download the CA certificate bundle into the staging directory.

        :return: The path to the installed bundle.

        :raise DownloadError: If the bundle cannot be downloaded.
        :raise FilesystemError: If the bundle cannot be written.
        """
        logger.info("-- Adding CA bundle")
        ca_bundle = self._destination / layout.CA_BUNDLE
        return sources.fetch(CA_BUNDLE_URL, ca_bundle, timeout=self._download_timeout)

    def remove_programs(self) -> list[Path]:
        """Delete server-side and unsupported programs from the staging directory.

        :return: The removed files.

        :raise MissingExpectedArtifact: If a program to remove does not exist.
        :raise FilesystemError: If a program cannot be removed.
        """
        removed: list[Path] = []

        logger.info("-- Removing server-side programs")
        removed.extend(self._remove(layout.SERVER_PROGRAMS))

        logger.info("-- Removing unsupported features")
        removed.extend(self._remove(layout.UNSUPPORTED_PROGRAMS))

        return removed

    def _remove(self, programs: tuple[str, ...]) -> list[Path]:
        removed = []
        for program in programs:
            path = self._destination / program
            try:
                path.unlink()
            except FileNotFoundError as err:
                raise errors.MissingExpectedArtifact(Path(program)) from err
            except OSError as err:
                raise errors.FilesystemError(path, err.strerror or str(err)) from err
            logger.debug("removed %s", path)
            removed.append(path)
        return removed
