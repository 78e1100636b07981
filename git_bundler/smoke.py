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

"""End-to-end check of the assembled Git binary."""

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from git_bundler import errors, layout
from git_bundler.toolchain import BuildTarget, get_host_architecture
from git_bundler.utils import os_utils

logger = logging.getLogger(__name__)

SMOKE_TEST_REPOSITORY = "https://github.com/git/git.github.io"


def can_run_on_host(target: BuildTarget, host_arch: str | None = None) -> bool:
    """Verify whether binaries for the target can be executed on this host.

    :param target: The cross-compilation profile.
    :param host_arch: The host architecture token, detected if not given.
    """
    if host_arch is None:
        host_arch = get_host_architecture()
    return target.architecture == host_arch


def get_smoke_test_environment(destination: Path) -> dict[str, str]:
    """Return the variables pointing Git at the files in the bundle."""
    return {
        "GIT_CURL_VERBOSE": "1",
        "GIT_TEMPLATE_DIR": str(destination / layout.TEMPLATE_DIR),
        "GIT_SSL_CAINFO": str(destination / layout.CA_BUNDLE),
        "GIT_EXEC_PATH": str(destination / layout.EXEC_PATH),
        "PREFIX": str(destination),
    }


def smoke_test(
    destination: Path,
    *,
    work_dir: Path,
    timeout: float | None = None,
    verbose: bool = False,
) -> Path:
    """Print the Git version and clone a public repository with the bundle.

    :param destination: The staging directory.
    :param work_dir: The directory that receives the clone.
    :param timeout: Seconds allowed for each command.
    :param verbose: Log command output at info level instead of debug.

    :return: The path of the cloned repository.

    :raise SmokeTestError: If a command fails.
    """
    logger.info("-- Testing clone operation with generated binary")

    git = destination / layout.GIT_EXECUTABLE
    clone_dir = work_dir / "clones" / "git.github.io"
    if clone_dir.exists():
        shutil.rmtree(clone_dir)
    clone_dir.parent.mkdir(parents=True, exist_ok=True)

    env = os_utils.build_environment(get_smoke_test_environment(destination))
    log_func = logger.info if verbose else logger.debug

    def run(command: Sequence[str]) -> None:
        try:
            os_utils.process_run(
                command, log_func, cwd=git.parent, env=env, timeout=timeout
            )
        except subprocess.CalledProcessError as err:
            raise errors.SmokeTestError(
                command=command, exit_code=err.returncode
            ) from err
        except subprocess.TimeoutExpired as err:
            raise errors.SmokeTestError(
                command=command, message=f"timed out after {err.timeout:g} seconds"
            ) from err
        except OSError as err:
            raise errors.SmokeTestError(
                command=command, message=err.strerror or str(err)
            ) from err

    run([str(git), "--version"])
    run([str(git), "clone", SMOKE_TEST_REPOSITORY, str(clone_dir)])

    logger.info("Smoke test clone succeeded")
    return clone_dir
