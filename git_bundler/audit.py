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

"""Static linking inspection of the assembled bundle.

The audit is informational: problems are reported as warnings and never
stop the pipeline.
"""

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from git_bundler import layout
from git_bundler.utils import file_utils

logger = logging.getLogger(__name__)

# Libraries built by the pipeline, which must not be linked dynamically.
EXPECTED_STATIC_LIBRARIES = ("libz", "libssl", "libcrypto", "libcurl")

SCANNED_DIRS = (layout.BIN_DIR, layout.EXEC_PATH)

_NEEDED = re.compile(r"\(NEEDED\)\s+Shared library:\s+\[(?P<library>[^\]]+)\]")


@dataclass(frozen=True)
class LinkageFinding:
    """A binary linked dynamically against a library expected to be static."""

    path: Path
    library: str


@dataclass
class LinkageReport:
    """The outcome of a static linking audit."""

    scanned: list[Path] = field(default_factory=list)
    dynamic_libraries: dict[Path, list[str]] = field(default_factory=dict)
    findings: list[LinkageFinding] = field(default_factory=list)
    problems: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """Whether no findings or problems were reported."""
        return not self.findings and not self.problems


def audit(
    destination: Path, *, readelf: str = "readelf", timeout: float = 60.0
) -> LinkageReport:
    """Report binaries dynamically linked against the bundled libraries.

    :param destination: The staging directory.
    :param readelf: The readelf program to use.
    :param timeout: Seconds allowed for each readelf invocation.

    :return: The audit report. This function does not raise.
    """
    logger.info("-- Static linking research")
    report = LinkageReport()

    try:
        binaries = _find_binaries(destination)
    except OSError as err:
        problem = f"cannot scan {destination}: {err}"
        logger.warning(problem)
        report.problems.append(problem)
        return report

    for binary in binaries:
        report.scanned.append(binary)
        try:
            needed = get_needed_libraries(binary, readelf=readelf, timeout=timeout)
        except FileNotFoundError:
            problem = f"{readelf!r} is not available, static linking audit skipped"
            logger.warning(problem)
            report.problems.append(problem)
            break
        except (OSError, subprocess.SubprocessError) as err:
            problem = f"cannot inspect {binary}: {err}"
            logger.warning(problem)
            report.problems.append(problem)
            continue

        report.dynamic_libraries[binary] = needed
        logger.debug("%s: %s", binary, ", ".join(needed) or "static")

        for library in needed:
            if _library_stem(library) in EXPECTED_STATIC_LIBRARIES:
                finding = LinkageFinding(path=binary, library=library)
                report.findings.append(finding)
                logger.warning(
                    "%s is dynamically linked against %s",
                    binary.relative_to(destination),
                    library,
                )

    if report.clean:
        logger.info("No unexpected dynamic linking in %d binaries", len(report.scanned))

    return report


def get_needed_libraries(
    binary: Path, *, readelf: str = "readelf", timeout: float | None = None
) -> list[str]:
    """List the shared libraries an ELF file depends on.

    :raise FileNotFoundError: If readelf is not installed.
    :raise subprocess.CalledProcessError: If readelf fails.
    :raise subprocess.TimeoutExpired: If readelf takes too long.
    """
    output = subprocess.check_output(
        [readelf, "-d", str(binary)],
        text=True,
        stderr=subprocess.STDOUT,
        timeout=timeout,
    )
    return [m.group("library") for m in _NEEDED.finditer(output)]


def _find_binaries(destination: Path) -> list[Path]:
    binaries = []
    for subdir in SCANNED_DIRS:
        root = destination / subdir
        if not root.is_dir():
            continue
        binaries.extend(p for p in sorted(root.rglob("*")) if file_utils.is_elf_file(p))
    return binaries


def _library_stem(library: str) -> str:
    # libcurl.so.4 -> libcurl
    return library.split(".so", 1)[0]
