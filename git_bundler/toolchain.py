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

"""Cross-compilation toolchain profiles."""

import logging
import platform
import shlex
from dataclasses import dataclass
from types import MappingProxyType

from git_bundler import errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildTarget:
    """The cross-compilation profile for one target architecture.

    :param architecture: The architecture token, e.g. ``x64``.
    :param dependency_arch: The architecture tag used by the dependency manifest.
    :param compiler: The C compiler invocation, possibly with flags.
    :param host_triple: The GNU host triplet prefix of the cross toolchain.
    :param openssl_platform: The OpenSSL ``Configure`` platform target.
    """

    architecture: str
    dependency_arch: str
    compiler: str
    host_triple: str
    openssl_platform: str

    @property
    def cross_prefix(self) -> str:
        """The prefix prepended to toolchain program names."""
        return f"{self.host_triple}-"

    @property
    def strip_tool(self) -> str:
        """The strip program for binaries of this architecture."""
        return f"{self.cross_prefix}strip"

    @property
    def compiler_argv(self) -> list[str]:
        """The compiler invocation split into arguments."""
        return shlex.split(self.compiler)


_TARGETS = MappingProxyType(
    {
        "x64": BuildTarget(
            architecture="x64",
            dependency_arch="amd64",
            compiler="x86_64-linux-gcc -no-pie",
            host_triple="x86_64-linux",
            openssl_platform="linux-x86_64",
        ),
        "x86": BuildTarget(
            architecture="x86",
            dependency_arch="x86",
            compiler="i686-linux-gcc",
            host_triple="i686-linux",
            openssl_platform="linux-x86",
        ),
        "arm64": BuildTarget(
            architecture="arm64",
            dependency_arch="arm64",
            compiler="aarch64-linux-gcc -no-pie",
            host_triple="aarch64-linux",
            openssl_platform="linux-aarch64",
        ),
        "arm": BuildTarget(
            architecture="arm",
            dependency_arch="arm",
            compiler="arm-linux-gcc",
            host_triple="arm-linux",
            openssl_platform="linux-armv4",
        ),
    }
)

# Platform machine names to architecture tokens.
_PLATFORM_MACHINE_TO_ARCH = {
    "x86_64": "x64",
    "AMD64": "x64",
    "amd64": "x64",
    "i386": "x86",
    "i686": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv8l": "arm",
}


def supported_architectures() -> list[str]:
    """List the architecture tokens that can be resolved."""
    return list(_TARGETS)


def resolve_target(architecture: str) -> BuildTarget:
    """Obtain the toolchain profile for the given architecture.

    :param architecture: The architecture token.

    :raise UnsupportedArchitecture: If the token is not in the toolchain table.
    """
    try:
        target = _TARGETS[architecture]
    except KeyError as err:
        raise errors.UnsupportedArchitecture(
            architecture, supported=supported_architectures()
        ) from err

    logger.debug("resolved toolchain for %s: %s", architecture, target)
    return target


def get_host_architecture() -> str:
    """Obtain the host architecture token, or the raw machine name if unknown."""
    machine = platform.machine()
    return _PLATFORM_MACHINE_TO_ARCH.get(machine, machine)
