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

"""Build drivers for Git and its bundled libraries."""

from .base import BuildOutcome, Builder, DependencyBuilder
from .curl_builder import CurlBuilder
from .git_builder import GitBuilder
from .openssl_builder import OpenSSLBuilder
from .zlib_builder import ZlibBuilder

__all__ = [
    "BuildOutcome",
    "Builder",
    "CurlBuilder",
    "DependencyBuilder",
    "GitBuilder",
    "OpenSSLBuilder",
    "ZlibBuilder",
]
