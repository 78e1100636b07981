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

"""Helpers to compute and verify file checksums."""

from pathlib import Path

from git_bundler import errors
from git_bundler.utils import file_utils

DEFAULT_ALGORITHM = "sha256"


def digest(path: Path, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Compute the hex-encoded digest of a file.

    :param path: The file to digest.
    :param algorithm: The hash algorithm, as named by ``hashlib``.

    :return: The lowercase hex digest.

    :raise FilesystemError: If the file cannot be read.
    :raise ValueError: If the algorithm is not supported.
    """
    try:
        return file_utils.calculate_hash(path, algorithm=algorithm)
    except OSError as err:
        raise errors.FilesystemError(path, err.strerror or str(err)) from err


def verify(computed: str, expected: str) -> bool:
    """Compare a computed digest against the expected value.

    The comparison is byte-exact: no case folding or whitespace trimming
    is performed.
    """
    return computed == expected


def split_checksum(source_checksum: str) -> tuple[str, str]:
    """Split the given source checksum into algorithm and hash.

    :param source_checksum: Source checksum in algorithm/hash format.

    :return: a tuple consisting of the algorithm and the hash.

    :raise ValueError: If the checksum is not in the expected format.
    """
    try:
        algorithm, hexdigest = source_checksum.split("/", 1)
    except ValueError as err:
        raise ValueError(f"invalid checksum format: {source_checksum!r}") from err

    return (algorithm, hexdigest)


def verify_checksum(source_checksum: str, checkfile: Path) -> tuple[str, str]:
    """Verify that checkfile corresponds to the given source checksum.

    :param source_checksum: Source checksum in algorithm/hash format.
    :param checkfile: The file to calculate the sum for with the algorithm
        defined in source_checksum.

    :return: A tuple consisting of the algorithm and the hash.

    :raise ValueError: If source_checksum is not of the form algorithm/hash.
    :raise ChecksumMismatch: If checkfile does not match the expected hash
        calculated with the algorithm defined in source_checksum.
    """
    algorithm, expected = split_checksum(source_checksum)

    calculated = digest(checkfile, algorithm)
    if not verify(calculated, expected):
        raise errors.ChecksumMismatch(
            expected=expected, obtained=calculated, name=checkfile.name
        )

    return (algorithm, expected)
