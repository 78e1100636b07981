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

from pathlib import Path

import pytest
import requests
from git_bundler.utils import url_utils


@pytest.mark.parametrize(
    ("url", "scheme"),
    [
        ("https://zlib.net/zlib-1.2.13.tar.gz", "https"),
        ("ftp://example.com/file", "ftp"),
        ("/local/file", ""),
    ],
)
def test_get_url_scheme(url, scheme):
    assert url_utils.get_url_scheme(url) == scheme


@pytest.mark.parametrize(
    ("url", "basename"),
    [
        ("https://zlib.net/zlib-1.2.13.tar.gz", "zlib-1.2.13.tar.gz"),
        (
            "https://github.com/openssl/openssl/releases/download/"
            "openssl-3.1.1/openssl-3.1.1.tar.gz?raw=1",
            "openssl-3.1.1.tar.gz",
        ),
    ],
)
def test_get_url_basename(url, basename):
    assert url_utils.get_url_basename(url) == basename


def test_download_request(new_path, requests_mock):
    source_url = "http://test.com/source"
    requests_mock.get(source_url, text="content")
    dest = Path("destination")

    with requests.get(source_url, stream=True, timeout=3600) as request:
        written = url_utils.download_request(request, dest)

    assert written == len("content")
    assert dest.read_text() == "content"


def test_download_request_truncates(new_path, requests_mock):
    source_url = "http://test.com/source"
    requests_mock.get(source_url, text="new")
    dest = Path("destination")
    dest.write_text("old content")

    with requests.get(source_url, stream=True, timeout=3600) as request:
        url_utils.download_request(request, dest)

    assert dest.read_text() == "new"
