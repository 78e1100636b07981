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

"""Tarball extraction."""

import fnmatch
import logging
import os
import re
import tarfile
from collections.abc import Iterator, Sequence
from pathlib import Path

from git_bundler import errors

logger = logging.getLogger(__name__)


def extract_tarball(
    tarball: Path,
    dst: Path,
    *,
    strip_components: int | None = None,
    exclude: Sequence[str] = (),
) -> list[str]:
    """Extract tarball contents to a directory.

    :param tarball: The archive to extract.
    :param dst: The directory to extract into. It is created if needed.
    :param strip_components: Number of leading path components to remove
        from member names. If None, the directory prefix common to all
        members is removed.
    :param exclude: Glob patterns of member names to skip, matched against
        both the full member path and its last component.

    :return: The names of the extracted members, relative to ``dst``.

    :raise ExtractionError: If the archive cannot be read or written.
    """
    extracted: list[str] = []

    try:
        dst.mkdir(parents=True, exist_ok=True)
        with tarfile.open(tarball) as tar:
            members = tar.getmembers()
            if strip_components is None:
                prefix = _common_prefix(members)
                selected = _strip_common_prefix(members, prefix)
            else:
                selected = _strip_components(members, strip_components)

            def filter_members() -> Iterator[tarfile.TarInfo]:
                for member in selected:
                    if _is_excluded(member.name, exclude):
                        logger.debug("excluding %s", member.name)
                        continue
                    # We mask all files to be writable to be able to easily
                    # extract on top.
                    member.mode = member.mode | 0o200
                    extracted.append(member.name)
                    yield member

            tar.extractall(members=filter_members(), path=dst)
    except (tarfile.TarError, OSError) as err:
        raise errors.ExtractionError(tarball, str(err)) from err

    return extracted


def _common_prefix(members: list[tarfile.TarInfo]) -> str:
    common = os.path.commonprefix([m.name for m in members])

    # commonprefix() works a character at a time and will
    # consider "d/ab" and "d/abc" to have common prefix "d/ab";
    # check all members either start with common dir
    for member in members:
        if not (
            member.name.startswith(common + "/")
            or member.isdir()
            and member.name == common
        ):
            # commonprefix() didn't return a dir name; go up one level
            return os.path.dirname(common)

    return common


def _strip_common_prefix(
    members: list[tarfile.TarInfo], common: str
) -> list[tarfile.TarInfo]:
    selected = []
    for member in members:
        if member.name == common:
            continue
        if common and member.name.startswith(common + "/"):
            member.name = member.name[len(common + "/") :]
        if member.islnk() and not member.issym():
            if common and member.linkname.startswith(common + "/"):
                member.linkname = member.linkname[len(common + "/") :]
        if _sanitize(member):
            selected.append(member)
    return selected


def _strip_components(
    members: list[tarfile.TarInfo], count: int
) -> list[tarfile.TarInfo]:
    selected = []
    for member in members:
        parts = re.sub(r"^(\./)+", "", member.name).split("/")
        if len(parts) <= count:
            continue
        member.name = "/".join(parts[count:])
        if member.islnk() and not member.issym():
            link_parts = member.linkname.split("/")
            member.linkname = "/".join(link_parts[count:])
        if _sanitize(member):
            selected.append(member)
    return selected


def _sanitize(member: tarfile.TarInfo) -> bool:
    # strip leading '/', './' or '../' as many times as needed
    member.name = re.sub(r"^(\.{0,2}/)*", r"", member.name)
    if member.islnk() and not member.issym():
        member.linkname = re.sub(r"^(\.{0,2}/)*", r"", member.linkname)

    if not member.name or ".." in member.name.split("/"):
        return False
    return True


def _is_excluded(name: str, patterns: Sequence[str]) -> bool:
    basename = name.rsplit("/", 1)[-1]
    return any(
        fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(basename, pattern)
        for pattern in patterns
    )
