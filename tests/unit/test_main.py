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

import git_bundler
import pytest
from git_bundler import errors
from git_bundler.config import ENVIRONMENT_VARIABLES
from git_bundler.main import main


@pytest.fixture
def environment(monkeypatch, required_environment):
    for variable in ENVIRONMENT_VARIABLES.values():
        monkeypatch.delenv(variable, raising=False)
    for variable, value in required_environment.items():
        monkeypatch.setenv(variable, value)
    return required_environment


@pytest.fixture
def mock_pipeline(mocker):
    return mocker.patch("git_bundler.main.Pipeline", autospec=True)


def test_version(capsys):
    with pytest.raises(SystemExit) as raised:
        main(["--version"])

    assert raised.value.code is None
    out, _ = capsys.readouterr()
    assert out == f"git-bundler {git_bundler.__version__}\n"


def test_run(environment, mock_pipeline):
    main([])

    mock_pipeline.assert_called_once()
    assert mock_pipeline.call_args.kwargs == {
        "force": False,
        "run_smoke_test": True,
        "verbose": False,
    }
    mock_pipeline.return_value.run.assert_called_once_with()


def test_run_options(environment, mock_pipeline):
    main(["--force", "--skip-smoke-test", "--verbose"])

    assert mock_pipeline.call_args.kwargs == {
        "force": True,
        "run_smoke_test": False,
        "verbose": True,
    }


def test_dry_run(environment, mocker, capsys):
    mock_process_run = mocker.patch("git_bundler.utils.os_utils.process_run")

    with pytest.raises(SystemExit) as raised:
        main(["--dry-run"])

    assert raised.value.code is None
    out, _ = capsys.readouterr()
    lines = out.splitlines()
    assert lines[0] == "Target: x64 (x86_64-linux)"
    assert lines[1].startswith("build-zlib: Build zlib 1.2.13 into ")
    assert lines[-1].startswith("smoke-test: ")
    mock_process_run.assert_not_called()


def test_missing_configuration(monkeypatch, new_path, mock_pipeline, capsys):
    for variable in ENVIRONMENT_VARIABLES.values():
        monkeypatch.delenv(variable, raising=False)

    with pytest.raises(SystemExit) as raised:
        main([])

    assert raised.value.code == 2
    _, err = capsys.readouterr()
    assert err.startswith(
        "Error: invalid build configuration: Required environment variables "
        "'CURL_INSTALL_DIR', 'DESTINATION', 'OPENSSL_INSTALL_DIR', 'SOURCE', "
        "'TARGET_ARCH', and 'ZLIB_INSTALL_DIR' not set."
    )
    mock_pipeline.assert_not_called()


def test_unsupported_architecture(environment, monkeypatch, mocker, capsys):
    monkeypatch.setenv("TARGET_ARCH", "riscv64")
    mock_process_run = mocker.patch("git_bundler.utils.os_utils.process_run")

    with pytest.raises(SystemExit) as raised:
        main([])

    assert raised.value.code == 3
    _, err = capsys.readouterr()
    assert err == (
        "Error: Architecture 'riscv64' is not supported.\n"
        "Set TARGET_ARCH to one of 'arm', 'arm64', 'x64', or 'x86'.\n"
    )
    mock_process_run.assert_not_called()


def test_pipeline_error(environment, mock_pipeline, capsys):
    mock_pipeline.return_value.run.side_effect = errors.CompileError(
        library="git", command=["make", "-j2", "strip"], exit_code=2
    )

    with pytest.raises(SystemExit) as raised:
        main([])

    assert raised.value.code == 3
    _, err = capsys.readouterr()
    assert err == (
        "Error: Failed to compile 'git': "
        "command 'make -j2 strip' exited with code 2.\n"
    )


def test_missing_config_file(environment, mock_pipeline, capsys):
    with pytest.raises(SystemExit) as raised:
        main(["--file", "missing.yaml"])

    assert raised.value.code == 1
    _, err = capsys.readouterr()
    assert err == "Error: missing.yaml: No such file or directory.\n"


def test_config_file(environment, monkeypatch, new_path, mock_pipeline):
    monkeypatch.delenv("TARGET_ARCH")
    (new_path / "bundler.yaml").write_text("target-arch: arm64\n")

    main(["--file", "bundler.yaml"])

    config = mock_pipeline.call_args.args[0]
    assert config.target_arch == "arm64"


def test_invalid_library_checksum(environment, new_path, mock_pipeline, capsys):
    (new_path / "bundler.yaml").write_text(
        "libraries:\n"
        "  zlib:\n"
        "    version: 1.3.1\n"
        "    url: https://zlib.net/zlib-1.3.1.tar.gz\n"
        "    checksum: deadbeef\n"
    )

    with pytest.raises(SystemExit) as raised:
        main(["--file", "bundler.yaml"])

    assert raised.value.code == 2
    _, err = capsys.readouterr()
    assert err.startswith("Error: invalid build configuration: ")
    assert "invalid checksum format: 'deadbeef'" in err
    mock_pipeline.assert_not_called()
