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

"""Utilities related to the operating system."""

import logging
import os
import subprocess
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def process_run(
    command: Sequence[str],
    log_func: Callable[[str], None],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> None:
    """Run a command and handle its output.

    Output lines (stdout and stderr combined) are passed to ``log_func``
    as they are produced.

    :param command: The command to run.
    :param log_func: The function that receives each output line.
    :param cwd: The working directory for the command.
    :param env: The complete environment for the command.
    :param timeout: Kill the command after this many seconds.

    :raise subprocess.CalledProcessError: If the command exits with non-zero status.
    :raise subprocess.TimeoutExpired: If the command was killed after a timeout.
    :raise OSError: If the command could not be executed.
    """
    expired = threading.Event()

    with subprocess.Popen(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        universal_newlines=True,
        cwd=cwd,
        env=env,
    ) as proc:

        def _kill() -> None:
            expired.set()
            proc.kill()

        timer = threading.Timer(timeout, _kill) if timeout else None
        if timer:
            timer.start()

        try:
            if proc.stdout:
                for line in iter(proc.stdout.readline, ""):
                    log_func(":: " + line.rstrip())
            ret = proc.wait()
        finally:
            if timer:
                timer.cancel()

    if expired.is_set():
        raise subprocess.TimeoutExpired(list(command), timeout or 0)

    if ret:
        raise subprocess.CalledProcessError(ret, list(command))


def build_environment(
    overrides: dict[str, str], *, base: dict[str, str] | None = None
) -> dict[str, str]:
    """Obtain a complete subprocess environment.

    :param overrides: Variables to set on top of the base environment.
    :param base: The base environment, defaults to the current process environment.
    """
    env = dict(os.environ if base is None else base)
    env.update(overrides)
    return env
