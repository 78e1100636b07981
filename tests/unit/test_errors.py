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
from git_bundler import errors


def test_bundler_error_brief():
    err = errors.BundlerError(brief="A brief description.")
    assert str(err) == "A brief description."
    assert (
        repr(err)
        == "BundlerError(brief='A brief description.', details=None, resolution=None)"
    )
    assert err.brief == "A brief description."
    assert err.details is None
    assert err.resolution is None


def test_bundler_error_full():
    err = errors.BundlerError(brief="Brief", details="Details", resolution="Resolution")
    assert str(err) == "Brief\nDetails\nResolution"
    assert err.brief == "Brief"
    assert err.details == "Details"
    assert err.resolution == "Resolution"


def test_configuration_error_missing_one():
    err = errors.ConfigurationError(missing=["SOURCE"])
    assert err.missing == ["SOURCE"]
    assert err.brief == "Required environment variable 'SOURCE' not set."
    assert err.details is None
    assert err.resolution == "Set the required variables and try again."


def test_configuration_error_missing_many():
    err = errors.ConfigurationError(missing=["SOURCE", "DESTINATION", "TARGET_ARCH"])
    assert err.brief == (
        "Required environment variables 'DESTINATION', 'SOURCE', "
        "and 'TARGET_ARCH' not set."
    )


def test_configuration_error_invalid():
    err = errors.ConfigurationError(invalid=["bad value in 'DOWNLOAD_TIMEOUT'"])
    assert err.missing == []
    assert err.brief == "Invalid build configuration."
    assert err.details == "- bad value in 'DOWNLOAD_TIMEOUT'"


def test_unsupported_architecture():
    err = errors.UnsupportedArchitecture("riscv64", supported=["x64", "arm"])
    assert err.arch_name == "riscv64"
    assert err.brief == "Architecture 'riscv64' is not supported."
    assert err.resolution == "Set TARGET_ARCH to one of 'arm' or 'x64'."


def test_unsupported_architecture_no_alternatives():
    err = errors.UnsupportedArchitecture("riscv64")
    assert err.resolution is None


def test_manifest_error():
    err = errors.ManifestError(Path("dependencies.json"), "invalid JSON")
    assert err.path == Path("dependencies.json")
    assert err.brief == (
        "Dependency manifest 'dependencies.json' is invalid: invalid JSON."
    )
    assert err.resolution == (
        "Review the dependency manifest and make sure it's correct."
    )


def test_filesystem_error():
    err = errors.FilesystemError(Path("/dest/file"), "Permission denied")
    assert err.brief == "Cannot access '/dest/file': Permission denied."


def test_source_not_found():
    err = errors.SourceNotFound("https://example.com/file.tar.gz")
    assert isinstance(err, errors.DownloadError)
    assert err.source == "https://example.com/file.tar.gz"
    assert err.brief == (
        "Failed to download 'https://example.com/file.tar.gz': not found."
    )


def test_http_request_error():
    err = errors.HttpRequestError(
        status_code=503, reason="Service Unavailable", source="https://example.com/f"
    )
    assert isinstance(err, errors.DownloadError)
    assert err.status_code == 503
    assert err.brief == (
        "Failed to download 'https://example.com/f': "
        "server returned 503 (Service Unavailable)."
    )
    assert err.resolution == "Check the network and try again."


def test_network_request_error():
    err = errors.NetworkRequestError("timed out", source="https://example.com/f")
    assert isinstance(err, errors.DownloadError)
    assert err.brief == (
        "Network request error downloading 'https://example.com/f': timed out."
    )


def test_checksum_mismatch():
    err = errors.ChecksumMismatch(expected="1234", obtained="5678")
    assert err.expected == "1234"
    assert err.obtained == "5678"
    assert err.brief == "Expected digest 1234, obtained 5678."
    assert err.details is None


def test_checksum_mismatch_with_name():
    err = errors.ChecksumMismatch(expected="1234", obtained="5678", name="lfs.tar.gz")
    assert err.details == "The downloaded file 'lfs.tar.gz' was not installed."


def test_extraction_error():
    err = errors.ExtractionError(Path("/work/file.tar.gz"), "truncated")
    assert err.brief == "Failed to extract 'file.tar.gz': truncated."


def test_extraction_layout_error():
    err = errors.ExtractionLayoutError(
        archive="git-lfs.tar.gz", expected=Path("libexec/git-core/git-lfs")
    )
    assert err.brief == (
        "After extracting 'git-lfs.tar.gz' the file "
        "'libexec/git-core/git-lfs' was not found."
    )


@pytest.mark.parametrize(
    ("error_class", "step"),
    [
        (errors.ConfigureError, "configure"),
        (errors.CompileError, "compile"),
        (errors.InstallError, "install"),
    ],
)
def test_build_step_error_exit_code(error_class, step):
    err = error_class(library="zlib", command=["make", "-j2"], exit_code=2)
    assert isinstance(err, errors.BuildStepError)
    assert err.library == "zlib"
    assert err.command == ["make", "-j2"]
    assert err.exit_code == 2
    assert err.brief == (
        f"Failed to {step} 'zlib': command 'make -j2' exited with code 2."
    )


def test_build_step_error_message():
    err = errors.CompileError(
        library="curl", command=["make"], message="timed out after 10 seconds"
    )
    assert err.exit_code is None
    assert err.brief == (
        "Failed to compile 'curl': command 'make' timed out after 10 seconds."
    )


def test_build_step_error_no_command():
    err = errors.ConfigureError(library="git", command=[], message="no STRIP entry")
    assert err.brief == "Failed to configure 'git': no STRIP entry."


def test_build_step_error_quotes_arguments():
    err = errors.ConfigureError(
        library="git", command=["./configure", "--prefix=/my dir"], exit_code=1
    )
    assert "./configure '--prefix=/my dir'" in err.brief


def test_missing_expected_artifact():
    err = errors.MissingExpectedArtifact(Path("bin/git-shell"))
    assert err.path == Path("bin/git-shell")
    assert err.brief == "Expected file 'bin/git-shell' to be removed was not found."


def test_layout_validation_error():
    err = errors.LayoutValidationError(
        missing=["bin/git"], unexpected=["bin/git-shell", "libexec/git-core/git-p4"]
    )
    assert err.brief == "The assembled bundle layout is invalid."
    assert err.details == (
        "- missing: bin/git\n"
        "- unexpected: bin/git-shell\n"
        "- unexpected: libexec/git-core/git-p4"
    )


def test_smoke_test_error():
    err = errors.SmokeTestError(command=["git", "--version"], exit_code=127)
    assert err.brief == (
        "Smoke test failed: command 'git --version' exited with code 127."
    )
