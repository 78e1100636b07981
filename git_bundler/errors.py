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

"""Git bundler errors."""

import dataclasses
from collections.abc import Sequence
from pathlib import Path

from git_bundler.utils import formatting_utils


@dataclasses.dataclass(repr=True)
class BundlerError(Exception):
    """Unexpected error.

    :param brief: Brief description of error.
    :param details: Detailed information.
    :param resolution: Recommendation, if any.
    """

    brief: str
    details: str | None = None
    resolution: str | None = None

    def __str__(self) -> str:
        components = [self.brief]

        if self.details:
            components.append(self.details)

        if self.resolution:
            components.append(self.resolution)

        return "\n".join(components)


class ConfigurationError(BundlerError):
    """Required configuration is missing or invalid.

    :param missing: The names of the required variables that were not set.
    :param invalid: Messages describing invalid values.
    """

    def __init__(
        self,
        *,
        missing: Sequence[str] = (),
        invalid: Sequence[str] = (),
    ) -> None:
        self.missing = list(missing)
        self.invalid = list(invalid)

        if self.missing:
            names = formatting_utils.humanize_list(self.missing, "and")
            noun = "variable" if len(self.missing) == 1 else "variables"
            brief = f"Required environment {noun} {names} not set."
        else:
            brief = "Invalid build configuration."

        details = "\n".join(f"- {msg}" for msg in self.invalid) or None
        resolution = "Set the required variables and try again."

        super().__init__(brief=brief, details=details, resolution=resolution)


class UnsupportedArchitecture(BundlerError):
    """The target architecture has no toolchain profile.

    :param arch_name: The unsupported architecture name.
    :param supported: The supported architecture names.
    """

    def __init__(self, arch_name: str, supported: Sequence[str] = ()) -> None:
        self.arch_name = arch_name
        self.supported = list(supported)
        brief = f"Architecture {arch_name!r} is not supported."
        resolution = None
        if self.supported:
            names = formatting_utils.humanize_list(self.supported, "or")
            resolution = f"Set TARGET_ARCH to one of {names}."

        super().__init__(brief=brief, resolution=resolution)


class ManifestError(BundlerError):
    """The dependency manifest cannot be used.

    :param path: The manifest file.
    :param message: The error message.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        brief = f"Dependency manifest {str(path)!r} is invalid: {message}."
        resolution = "Review the dependency manifest and make sure it's correct."

        super().__init__(brief=brief, resolution=resolution)


class FilesystemError(BundlerError):
    """A local file could not be read or written.

    :param path: The file being accessed.
    :param message: The error message.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        brief = f"Cannot access {str(path)!r}: {message}."

        super().__init__(brief=brief)


class DownloadError(BundlerError):
    """Base class for download errors."""


class SourceNotFound(DownloadError):
    """The remote file does not exist.

    :param source: The URL of the file.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        brief = f"Failed to download {source!r}: not found."
        resolution = "Make sure the download URL is correct and accessible."

        super().__init__(brief=brief, resolution=resolution)


class HttpRequestError(DownloadError):
    """The server answered a download request with an error.

    :param status_code: The HTTP status code.
    :param reason: The reason phrase sent by the server.
    :param source: The URL of the file.
    """

    def __init__(self, *, status_code: int, reason: str, source: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.source = source
        brief = (
            f"Failed to download {source!r}: "
            f"server returned {status_code} ({reason})."
        )
        resolution = "Check the network and try again."

        super().__init__(brief=brief, resolution=resolution)


class NetworkRequestError(DownloadError):
    """A network request operation failed.

    :param message: The error message.
    :param source: The URL of the file.
    """

    def __init__(self, message: str, *, source: str) -> None:
        self.message = message
        self.source = source
        brief = f"Network request error downloading {source!r}: {message}."
        resolution = "Check the network and try again."

        super().__init__(brief=brief, resolution=resolution)


class ChecksumMismatch(BundlerError):
    """A checksum doesn't match the expected value.

    :param expected: The expected checksum.
    :param obtained: The actual checksum.
    :param name: The name of the verified file, if known.
    """

    def __init__(self, *, expected: str, obtained: str, name: str | None = None):
        self.expected = expected
        self.obtained = obtained
        self.name = name
        brief = f"Expected digest {expected}, obtained {obtained}."
        details = f"The downloaded file {name!r} was not installed." if name else None

        super().__init__(brief=brief, details=details)


class ExtractionError(BundlerError):
    """An archive could not be extracted.

    :param archive: The archive file.
    :param message: The error message.
    """

    def __init__(self, archive: Path, message: str) -> None:
        self.archive = archive
        self.message = message
        brief = f"Failed to extract {archive.name!r}: {message}."

        super().__init__(brief=brief)


class ExtractionLayoutError(BundlerError):
    """An expected file was not produced by extracting an archive.

    :param archive: The extracted archive name.
    :param expected: The file that should exist after extraction.
    """

    def __init__(self, *, archive: str, expected: Path) -> None:
        self.archive = archive
        self.expected = expected
        brief = (
            f"After extracting {archive!r} the file {str(expected)!r} was not found."
        )
        resolution = "The archive layout may have changed upstream."

        super().__init__(brief=brief, resolution=resolution)


class BuildStepError(BundlerError):
    """Base class for failed upstream build commands.

    :param library: The name of the library being built.
    :param command: The command that failed.
    :param exit_code: The command exit code, or None if it did not exit.
    :param message: Describes the failure when there is no exit code.
    """

    step_name = "build"

    def __init__(
        self,
        *,
        library: str,
        command: Sequence[str],
        exit_code: int | None = None,
        message: str | None = None,
    ) -> None:
        self.library = library
        self.command = list(command)
        self.exit_code = exit_code
        self.message = message
        if exit_code is not None:
            outcome = f"exited with code {exit_code}"
        else:
            outcome = message or "failed"
        if self.command:
            command_line = formatting_utils.format_command(self.command)
            outcome = f"command {command_line!r} {outcome}"
        brief = f"Failed to {self.step_name} {library!r}: {outcome}."

        super().__init__(brief=brief)


class ConfigureError(BuildStepError):
    """Configuring an upstream project failed."""

    step_name = "configure"


class CompileError(BuildStepError):
    """Compiling an upstream project failed."""

    step_name = "compile"


class InstallError(BuildStepError):
    """Installing an upstream project failed."""

    step_name = "install"


class MissingExpectedArtifact(BundlerError):
    """A file scheduled for removal is not present in the destination.

    :param path: The missing file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        brief = f"Expected file {str(path)!r} to be removed was not found."
        resolution = "The Git build output layout may have changed."

        super().__init__(brief=brief, resolution=resolution)


class LayoutValidationError(BundlerError):
    """The assembled destination does not match the expected layout.

    :param missing: Paths that should exist but don't.
    :param unexpected: Paths that should not exist but do.
    """

    def __init__(self, *, missing: Sequence[str], unexpected: Sequence[str]) -> None:
        self.missing = list(missing)
        self.unexpected = list(unexpected)
        brief = "The assembled bundle layout is invalid."
        lines = [f"- missing: {path}" for path in self.missing]
        lines.extend(f"- unexpected: {path}" for path in self.unexpected)

        super().__init__(brief=brief, details="\n".join(lines))


class SmokeTestError(BundlerError):
    """The assembled binary failed the smoke test.

    :param command: The command that failed.
    :param exit_code: The command exit code, or None if it did not exit.
    :param message: Describes the failure when there is no exit code.
    """

    def __init__(
        self,
        *,
        command: Sequence[str],
        exit_code: int | None = None,
        message: str | None = None,
    ) -> None:
        self.command = list(command)
        self.exit_code = exit_code
        self.message = message
        if exit_code is not None:
            outcome = f"exited with code {exit_code}"
        else:
            outcome = message or "failed"
        command_line = formatting_utils.format_command(self.command)
        brief = f"Smoke test failed: command {command_line!r} {outcome}."

        super().__init__(brief=brief)
