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

"""The Git build driver."""

import logging
import re
from pathlib import Path
from typing import Any

from overrides import override

from git_bundler import errors

from .base import BuildOutcome, Builder, Command

logger = logging.getLogger(__name__)

_CFLAGS = (
    "-Wall -g -O2 -fstack-protector --param=ssp-buffer-size=4 "
    "-Wformat -Werror=format-security -U_FORTIFY_SOURCE"
)
_LDFLAGS = "-Wl,-Bsymbolic-functions -Wl,-z,relro"

# Autoconf checks that can't run when cross-compiling.
_AUTOCONF_CACHE = {
    "ac_cv_iconv_omits_bom": "no",
    "ac_cv_fread_reads_directories": "no",
    "ac_cv_snprintf_returns_bogus": "no",
}

_STRIP_LINE = re.compile(r"^STRIP[ \t]*=[ \t]*(?P<tool>\S+)[ \t]*$", re.MULTILINE)


class GitBuilder(Builder):
    """Build Git from a source tree against the bundled libraries.

    The tree is cleaned before configuring, so objects built for another
    architecture never end up in the result. The build is installed with
    ``DESTDIR`` set to the destination and a ``/`` prefix.

    :param source_dir: The Git source tree.
    :param destination: The staging directory to install into.
    :param zlib_dir: The zlib install prefix.
    :param openssl_dir: The OpenSSL install prefix.
    :param curl_dir: The curl install prefix.
    """

    name = "git"

    def __init__(
        self,
        *,
        source_dir: Path,
        destination: Path,
        zlib_dir: Path,
        openssl_dir: Path,
        curl_dir: Path,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._source_dir = source_dir
        self._destination = destination
        self._zlib_dir = zlib_dir
        self._openssl_dir = openssl_dir
        self._curl_dir = curl_dir

    @override
    def get_build_environment(self) -> dict[str, str]:
        """Return the environment to use in all build phases."""
        env = super().get_build_environment()
        env.update(
            {
                "DESTDIR": str(self._destination),
                "NO_TCLTK": "1",
                "NO_GETTEXT": "1",
            }
        )
        return env

    @override
    def get_configure_environment(self) -> dict[str, str]:
        """Return the environment to use in the configure phase."""
        env = super().get_build_environment()
        env.update(
            {
                "OPENSSLDIR": str(self._openssl_dir),
                "CFLAGS": _CFLAGS,
                "LDFLAGS": _LDFLAGS,
                **_AUTOCONF_CACHE,
            }
        )
        return env

    @override
    def get_configure_commands(self) -> list[Command]:
        """Return the commands to run in the configure phase."""
        return [
            ["make", "clean"],
            ["make", "configure"],
            [
                "./configure",
                f"--host={self.target.host_triple}",
                f"--with-curl={self._curl_dir}",
                f"--with-zlib={self._zlib_dir}",
                "--prefix=/",
            ],
        ]

    @override
    def get_compile_commands(self) -> list[Command]:
        """Return the commands to run in the compile phase."""
        return [["make", f"-j{self._parallel_build_count}", "strip"]]

    @override
    def post_configure(self, build_dir: Path) -> None:
        """Make the install step strip binaries with the cross toolchain.

        :raise ConfigureError: If the Makefile has no strip tool entry.
        """
        makefile = build_dir / "Makefile"
        strip_tool = self.target.strip_tool

        try:
            content = makefile.read_text()
        except OSError as err:
            raise errors.ConfigureError(
                library=self.name, command=[], message=f"cannot read {makefile.name}"
            ) from err

        match = _STRIP_LINE.search(content)
        if not match:
            raise errors.ConfigureError(
                library=self.name,
                command=[],
                message=f"no STRIP entry found in {str(makefile)!r}",
            )

        current_tool = match.group("tool")
        if current_tool == strip_tool:
            logger.debug("Makefile already uses %s", strip_tool)
            return

        if current_tool != "strip":
            raise errors.ConfigureError(
                library=self.name,
                command=[],
                message=f"unexpected strip tool {current_tool!r} in Makefile",
            )

        logger.debug("setting STRIP = %s in %s", strip_tool, makefile)
        makefile.write_text(
            content[: match.start()] + f"STRIP = {strip_tool}" + content[match.end() :]
        )

    def build(self) -> BuildOutcome:
        """Clean, configure, compile and install Git into the destination.

        :raise ConfigureError: If configuring Git fails.
        :raise CompileError: If compiling Git fails.
        :raise InstallError: If installing Git fails.
        """
        logger.info(
            " -- Building git at %s to %s", self._source_dir, self._destination
        )
        self.run_build(self._source_dir)
        return BuildOutcome(name=self.name, prefix=self._destination)
