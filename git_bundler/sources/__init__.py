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

"""Retrieval and verification of remote files."""

from .archive import extract_tarball
from .cache import FileCache
from .checksum import digest, split_checksum, verify, verify_checksum
from .download import DEFAULT_TIMEOUT, fetch, fetch_cached

__all__ = [
    "DEFAULT_TIMEOUT",
    "FileCache",
    "digest",
    "extract_tarball",
    "fetch",
    "fetch_cached",
    "split_checksum",
    "verify",
    "verify_checksum",
]
