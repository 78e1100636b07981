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

"""Builder base classes and definitions."""

import abc
import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

import yaml

from git_bundler import errors, sources
from git_bundler.config import LibrarySource
from git_bundler.toolchain import BuildTarget
from git_bundler.utils import file_utils, formatting_utils, os_utils, url_utils

logger = logging.getLogger(__name__)

STATE_FILE_NAME = ".git-bundler-state.yaml"

Command = Sequence[str]


@dataclass(frozen=True)
class BuildOutcome:
    """The result of running a builder.

    :param name: The name of the built project.
    :param prefix: Where the build output was installed.
    :param skipped: Whether an up-to-date installation was reused.
    """

    name: str
    prefix: Path
    skipped: bool = False


class Builder(abc.ABC):
    """The base class for upstream build drivers.

    A build runs three phases in order: configure, compile and install.
    Each phase is a list of commands executed in the source tree; the
    first failing command aborts the build with the error class of its
    phase.

    :param target: The cross-compilation profile.
    :param parallel_build_count: The number of parallel make jobs.
    :param timeout: Seconds allowed for each build command.
    :param verbose: Log build output at info level instead of debug.
    """

    name: ClassVar[str]

    def __init__(
        self,
        *,
        target: BuildTarget,
        parallel_build_count: int = 1,
        timeout: float | None = None,
        verbose: bool = False,
    ) -> None:
        self._target = target
        self._parallel_build_count = parallel_build_count
        self._timeout = timeout
        self._log_func = logger.info if verbose else logger.debug

    @property
    def target(self) -> BuildTarget:
        """The cross-compilation profile used by this builder."""
        return self._target

    def get_build_environment(self) -> dict[str, str]:
        """Return the environment to use in all build phases."""
        return {
            "CC": self._target.compiler,
            "PKG_CONFIG": "pkg-config",
        }

    def get_configure_environment(self) -> dict[str, str]:
        """Return the environment to use in the configure phase."""
        return self.get_build_environment()

    @abc.abstractmethod
    def get_configure_commands(self) -> list[Command]:
        """Return the commands to run in the configure phase."""

    def get_compile_commands(self) -> list[Command]:
        """Return the commands to run in the compile phase."""
        return [["make", f"-j{self._parallel_build_count}"]]

    def get_install_commands(self) -> list[Command]:
        """Return the commands to run in the install phase."""
        return [["make", "install"]]

    def _run_phase(
        self,
        error_class: type[errors.BuildStepError],
        commands: list[Command],
        *,
        cwd: Path,
        environment: dict[str, str],
    ) -> None:
        env = os_utils.build_environment(environment)
        for command in commands:
            logger.debug(
                "running: %s %s",
                formatting_utils.format_environment(environment),
                formatting_utils.format_command(command),
            )
            try:
                os_utils.process_run(
                    command, self._log_func, cwd=cwd, env=env, timeout=self._timeout
                )
            except subprocess.CalledProcessError as err:
                raise error_class(
                    library=self.name, command=command, exit_code=err.returncode
                ) from err
            except subprocess.TimeoutExpired as err:
                raise error_class(
                    library=self.name,
                    command=command,
                    message=f"timed out after {err.timeout:g} seconds",
                ) from err
            except OSError as err:
                raise error_class(
                    library=self.name,
                    command=command,
                    message=err.strerror or str(err),
                ) from err

    def run_build(self, build_dir: Path) -> None:
        """Configure, compile and install the project in ``build_dir``.

        :raise ConfigureError: If a configure command fails.
        :raise CompileError: If a compile command fails.
        :raise InstallError: If an install command fails.
        """
        self._run_phase(
            errors.ConfigureError,
            self.get_configure_commands(),
            cwd=build_dir,
            environment=self.get_configure_environment(),
        )
        self.post_configure(build_dir)
        self._run_phase(
            errors.CompileError,
            self.get_compile_commands(),
            cwd=build_dir,
            environment=self.get_build_environment(),
        )
        self._run_phase(
            errors.InstallError,
            self.get_install_commands(),
            cwd=build_dir,
            environment=self.get_build_environment(),
        )

    def post_configure(self, build_dir: Path) -> None:
        """Adjust the configured tree before compiling."""


class DependencyBuilder(Builder):
    """Build an upstream library from its release tarball into a prefix.

    The prefix is owned by this builder. A state file is written to it
    once the library has been installed, and a later build with the same
    library source and target reuses the installation.

    :param library: The upstream source archive.
    :param install_dir: The install prefix.
    :param work_dir: Where archives are downloaded and extracted.
    :param cache: A cache of verified downloads.
    :param download_timeout: Seconds to wait for the download server.
    """

    def __init__(
        self,
        *,
        library: LibrarySource,
        install_dir: Path,
        work_dir: Path,
        target: BuildTarget,
        cache: sources.FileCache | None = None,
        download_timeout: float = sources.DEFAULT_TIMEOUT,
        parallel_build_count: int = 1,
        timeout: float | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__(
            target=target,
            parallel_build_count=parallel_build_count,
            timeout=timeout,
            verbose=verbose,
        )
        self._library = library
        self._install_dir = install_dir
        self._work_dir = work_dir
        self._cache = cache
        self._download_timeout = download_timeout

    @property
    def install_dir(self) -> Path:
        """The install prefix of this library."""
        return self._install_dir

    @property
    def source_dir(self) -> Path:
        """The directory the source archive is extracted to."""
        return self._work_dir / f"{self.name}-{self._library.version}"

    @property
    def archive_path(self) -> Path:
        """The downloaded source archive."""
        basename = url_utils.get_url_basename(self._library.url)
        return self._work_dir / "downloads" / basename

    @property
    def state_file(self) -> Path:
        """The file recording a completed installation."""
        return self._install_dir / STATE_FILE_NAME

    def _expected_state(self) -> dict[str, str]:
        return {
            "library": self.name,
            "version": self._library.version,
            "url": self._library.url,
            "target": self._target.architecture,
        }

    def is_up_to_date(self) -> bool:
        """Verify whether the prefix holds an installation of this exact build."""
        try:
            state = yaml.safe_load(self.state_file.read_text())
        except FileNotFoundError:
            return False
        except (OSError, yaml.YAMLError) as err:
            logger.debug("ignoring unreadable state file %s: %s", self.state_file, err)
            return False

        return state == self._expected_state()

    def build(self, *, force: bool = False) -> BuildOutcome:
        """Fetch, extract, configure, compile and install the library.

        :param force: Rebuild even if the prefix is up to date.

        :raise DownloadError: If the source archive cannot be downloaded.
        :raise ChecksumMismatch: If the archive doesn't match its checksum.
        :raise ExtractionError: If the archive cannot be extracted.
        :raise ConfigureError: If configuring the library fails.
        :raise CompileError: If compiling the library fails.
        :raise InstallError: If installing the library fails.
        """
        if not force and self.is_up_to_date():
            logger.info(
                " -- Reusing %s %s at %s",
                self.name,
                self._library.version,
                self._install_dir,
            )
            return BuildOutcome(name=self.name, prefix=self._install_dir, skipped=True)

        logger.info(
            " -- Building vanilla %s %s at %s",
            self.name,
            self._library.version,
            self._install_dir,
        )

        # A stale state file must not survive a failed rebuild.
        file_utils.unlink_quietly(self.state_file)

        archive = sources.fetch_cached(
            self._library.url,
            self.archive_path,
            source_checksum=self._library.checksum,
            cache=self._cache,
            timeout=self._download_timeout,
        )

        try:
            file_utils.reset_directory(self.source_dir)
        except OSError as err:
            raise errors.FilesystemError(
                self.source_dir, err.strerror or str(err)
            ) from err
        sources.extract_tarball(archive, self.source_dir)

        self.run_build(self.source_dir)

        self._write_state()
        return BuildOutcome(name=self.name, prefix=self._install_dir)

    def _write_state(self) -> None:
        try:
            self._install_dir.mkdir(parents=True, exist_ok=True)
            self.state_file.write_text(yaml.safe_dump(self._expected_state()))
        except OSError as err:
            raise errors.InstallError(
                library=self.name,
                command=[],
                message=f"cannot record installation state ({err.strerror})",
            ) from err
