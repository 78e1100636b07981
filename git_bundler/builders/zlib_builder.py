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

"""The zlib builder implementation."""

from overrides import override

from .base import Command, DependencyBuilder


class ZlibBuilder(DependencyBuilder):
    """Build a static zlib with the cross compiler.

    zlib's hand-written ``configure`` picks the compiler from ``CC`` and
    has no notion of host triplets.
    """

    name = "zlib"

    @override
    def get_configure_commands(self) -> list[Command]:
        """Return the commands to run in the configure phase."""
        return [["./configure", "--static", f"--prefix={self.install_dir}"]]
