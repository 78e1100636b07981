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

"""The OpenSSL builder implementation."""

from overrides import override

from .base import Command, DependencyBuilder


class OpenSSLBuilder(DependencyBuilder):
    """Build a static, non-PIC OpenSSL for the target platform.

    OpenSSL's ``Configure`` prepends the cross-compile prefix to the
    compiler name, so ``CC`` is set to the bare ``gcc``.
    """

    name = "openssl"

    @override
    def get_configure_environment(self) -> dict[str, str]:
        """Return the environment to use in the configure phase."""
        return {**self.get_build_environment(), "CC": "gcc"}

    @override
    def get_configure_commands(self) -> list[Command]:
        """Return the commands to run in the configure phase."""
        return [
            [
                "./Configure",
                self.target.openssl_platform,
                f"--prefix={self.install_dir}",
                f"--cross-compile-prefix={self.target.cross_prefix}",
                "-static",
                "no-pic",
            ]
        ]

