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

"""Download remote files to local storage."""

import logging
import shutil
from pathlib import Path

import requests

from git_bundler import errors
from git_bundler.utils import file_utils, url_utils

from .cache import FileCache
from .checksum import verify_checksum

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600.0


def fetch(url: str, destination: Path, *, timeout: float = DEFAULT_TIMEOUT) -> Path:
    """Download the URL to the destination path.

    Downloads are not resumable and are never retried. If the download
    fails, the partially written destination file is removed.

    :param url: The URL to download.
    :param destination: The file to write.
    :param timeout: Seconds to wait for the server between bytes received.

    :return: The destination path.

    :raise SourceNotFound: If the server answers 404.
    :raise HttpRequestError: If the server answers another error status.
    :raise NetworkRequestError: If the request fails or times out.
    :raise FilesystemError: If the destination cannot be written.
    """
    if url_utils.get_url_scheme(url) not in ("http", "https"):
        raise errors.NetworkRequestError("unsupported URL scheme", source=url)

    logger.debug("Fetching %s to %s", url, destination)

    try:
        request = requests.get(url, stream=True, allow_redirects=True, timeout=timeout)
        request.raise_for_status()
    except requests.exceptions.HTTPError as err:
        if err.response.status_code == requests.codes.not_found:
            raise errors.SourceNotFound(source=url) from err

        raise errors.HttpRequestError(
            status_code=err.response.status_code,
            reason=err.response.reason,
            source=url,
        ) from err
    except requests.exceptions.RequestException as err:
        raise errors.NetworkRequestError(
            f"network request failed ({err.__class__.__name__})", source=url
        ) from err

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        url_utils.download_request(request, destination)
    except requests.exceptions.RequestException as err:
        file_utils.unlink_quietly(destination)
        raise errors.NetworkRequestError(
            f"download interrupted ({err.__class__.__name__})", source=url
        ) from err
    except OSError as err:
        file_utils.unlink_quietly(destination)
        raise errors.FilesystemError(destination, err.strerror or str(err)) from err
    finally:
        request.close()

    return destination


def fetch_cached(
    url: str,
    destination: Path,
    *,
    source_checksum: str | None,
    cache: FileCache | None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """Download the URL, reusing a previously verified copy if available.

    If a checksum is given, the downloaded file is verified against it
    and stored in the cache under the checksum.

    :param url: The URL to download.
    :param destination: The file to write.
    :param source_checksum: The expected checksum in algorithm/hash form.
    :param cache: The file cache to consult, if any.
    :param timeout: Seconds to wait for the server between bytes received.

    :return: The destination path.

    :raise ChecksumMismatch: If the downloaded file doesn't match the checksum.
    """
    if source_checksum and cache:
        cache_file = cache.get(key=source_checksum)
        if cache_file:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(cache_file, destination)
            return destination

    fetch(url, destination, timeout=timeout)

    if source_checksum:
        try:
            verify_checksum(source_checksum, destination)
        except errors.ChecksumMismatch:
            file_utils.unlink_quietly(destination)
            raise
        if cache:
            cache.cache(filename=destination, key=source_checksum)

    return destination
