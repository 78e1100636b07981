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

"""Text formatting utilities."""

import shlex
from collections.abc import Iterable, Sequence


def humanize_list(
    items: Iterable[str], conjunction: str, item_format: str = "{!r}"
) -> str:
    """Format a list into a human-readable string.

    :param items: List to humanize.
    :param conjunction: The conjunction used to join the final element to
        the rest of the list (e.g. 'and').
    :param item_format: Format string to use per item.
    """
    quoted_items = [item_format.format(item) for item in sorted(items)]
    if not quoted_items:
        return ""

    if len(quoted_items) == 1:
        return quoted_items[0]

    humanized = ", ".join(quoted_items[:-1])

    if len(quoted_items) > 2:
        humanized += ","

    return f"{humanized} {conjunction} {quoted_items[-1]}"


def format_command(command: Sequence[str]) -> str:
    """Render a command line as it would be typed in a shell."""
    return shlex.join(command)


def format_environment(environment: dict[str, str]) -> str:
    """Render environment assignments to prefix a logged command line."""
    return " ".join(f"{key}={shlex.quote(val)}" for key, val in environment.items())
