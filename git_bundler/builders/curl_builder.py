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

"""The curl builder implementation."""

from pathlib import Path
from typing import Any

from overrides import override

from .base import Command, DependencyBuilder


class CurlBuilder(DependencyBuilder):
    """Build a static libcurl linked against the bundled zlib and OpenSSL.

    :param zlib_dir: The zlib install prefix.
    :param openssl_dir: The OpenSSL install prefix.
    """

    name = "curl"

    def __init__(self, *, zlib_dir: Path, openssl_dir: Path, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._zlib_dir = zlib_dir
        self._openssl_dir = openssl_dir

    @override
    def get_configure_commands(self) -> list[Command]:
        """Return the commands to run in the configure phase."""
        return [
            [
                "./configure",
                "--disable-shared",
                f"--with-zlib={self._zlib_dir}",
                f"--with-openssl={self._openssl_dir}",
                f"--prefix={self.install_dir}",
                f"--host={self.target.host_triple}",
                f"--target={self.target.host_triple}",
            ]
        ]
