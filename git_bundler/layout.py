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

"""The layout of the assembled bundle."""

import dataclasses
import logging
import os
from pathlib import Path

from git_bundler import errors

logger = logging.getLogger(__name__)

BIN_DIR = "bin"
EXEC_PATH = "libexec/git-core"
TEMPLATE_DIR = "share/git-core/templates"
CA_BUNDLE = "ssl/cacert.pem"
GIT_EXECUTABLE = f"{BIN_DIR}/git"
GIT_LFS_EXECUTABLE = f"{EXEC_PATH}/git-lfs"

SERVER_PROGRAMS = (
    f"{BIN_DIR}/git-cvsserver",
    f"{BIN_DIR}/git-receive-pack",
    f"{BIN_DIR}/git-upload-archive",
    f"{BIN_DIR}/git-upload-pack",
    f"{BIN_DIR}/git-shell",
)

UNSUPPORTED_PROGRAMS = (
    f"{EXEC_PATH}/git-svn",
    f"{EXEC_PATH}/git-p4",
)

REMOVED_PROGRAMS = SERVER_PROGRAMS + UNSUPPORTED_PROGRAMS


@dataclasses.dataclass(frozen=True)
class DestinationLayout:
    """Paths that must and must not exist in an assembled bundle.

    :param expected_present: Paths relative to the destination that must exist.
    :param expected_absent: Paths relative to the destination that must not exist.
    """

    expected_present: tuple[str, ...] = ()
    expected_absent: tuple[str, ...] = ()

    def require(self, *paths: str) -> "DestinationLayout":
        """Return a copy of this layout that also requires the given paths."""
        return dataclasses.replace(
            self, expected_present=self.expected_present + paths
        )

    def check(self, destination: Path) -> tuple[list[str], list[str]]:
        """Compare the destination tree against this layout.

        :return: The lists of missing and unexpected paths.
        """
        missing = [p for p in self.expected_present if not (destination / p).exists()]
        unexpected = [
            p for p in self.expected_absent if os.path.lexists(destination / p)
        ]
        return missing, unexpected

    def validate(self, destination: Path) -> None:
        """Verify the destination tree matches this layout.

        :raise LayoutValidationError: If any path is missing or unexpected.
        """
        missing, unexpected = self.check(destination)
        if missing or unexpected:
            raise errors.LayoutValidationError(missing=missing, unexpected=unexpected)

        logger.debug("layout of %s is valid", destination)


def bundle_layout(*, git_lfs: bool = False) -> DestinationLayout:
    """Obtain the layout of a complete bundle.

    :param git_lfs: Whether Git LFS was bundled.
    """
    layout = DestinationLayout(
        expected_present=(GIT_EXECUTABLE, EXEC_PATH, TEMPLATE_DIR),
        expected_absent=REMOVED_PROGRAMS,
    )
    if git_lfs:
        layout = layout.require(GIT_LFS_EXECUTABLE)
    return layout
