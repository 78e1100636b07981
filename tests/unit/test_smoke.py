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

import logging
import subprocess

import pytest
from git_bundler import errors, smoke


@pytest.fixture
def mock_process_run(mocker):
    return mocker.patch("git_bundler.utils.os_utils.process_run")


def test_can_run_on_host(x64_target, arm64_target):
    assert smoke.can_run_on_host(x64_target, "x64")
    assert not smoke.can_run_on_host(arm64_target, "x64")
    assert smoke.can_run_on_host(arm64_target, "arm64")


def test_can_run_on_host_detects_architecture(mocker, x64_target):
    mocker.patch("platform.machine", return_value="x86_64")
    assert smoke.can_run_on_host(x64_target)


def test_get_smoke_test_environment(staged_destination):
    env = smoke.get_smoke_test_environment(staged_destination)
    assert env == {
        "GIT_CURL_VERBOSE": "1",
        "GIT_TEMPLATE_DIR": str(staged_destination / "share/git-core/templates"),
        "GIT_SSL_CAINFO": str(staged_destination / "ssl/cacert.pem"),
        "GIT_EXEC_PATH": str(staged_destination / "libexec/git-core"),
        "PREFIX": str(staged_destination),
    }


def test_smoke_test(new_path, staged_destination, mock_process_run, caplog):
    caplog.set_level(logging.INFO)
    git = staged_destination / "bin/git"

    clone_dir = smoke.smoke_test(
        staged_destination, work_dir=new_path / "work", timeout=30
    )

    assert clone_dir == new_path / "work/clones/git.github.io"
    assert clone_dir.parent.is_dir()
    commands = [c.args[0] for c in mock_process_run.call_args_list]
    assert commands == [
        [str(git), "--version"],
        [str(git), "clone", "https://github.com/git/git.github.io", str(clone_dir)],
    ]
    for call in mock_process_run.call_args_list:
        assert call.kwargs["cwd"] == staged_destination / "bin"
        assert call.kwargs["timeout"] == 30
        assert call.kwargs["env"]["GIT_EXEC_PATH"] == str(
            staged_destination / "libexec/git-core"
        )
    assert "-- Testing clone operation with generated binary" in caplog.messages
    assert "Smoke test clone succeeded" in caplog.messages


def test_smoke_test_removes_previous_clone(
    new_path, staged_destination, mock_process_run
):
    previous = new_path / "work/clones/git.github.io"
    previous.mkdir(parents=True)
    (previous / "README.md").write_text("old clone")

    smoke.smoke_test(staged_destination, work_dir=new_path / "work")

    assert not previous.exists()


def test_smoke_test_version_failure(new_path, staged_destination, mock_process_run):
    mock_process_run.side_effect = subprocess.CalledProcessError(126, ["git"])

    with pytest.raises(errors.SmokeTestError) as raised:
        smoke.smoke_test(staged_destination, work_dir=new_path / "work")

    assert raised.value.exit_code == 126
    assert raised.value.command[-1] == "--version"
    assert mock_process_run.call_count == 1


def test_smoke_test_clone_failure(new_path, staged_destination, mock_process_run):
    def fail_clone(command, *args, **kwargs):
        if "clone" in command:
            raise subprocess.CalledProcessError(128, command)

    mock_process_run.side_effect = fail_clone

    with pytest.raises(errors.SmokeTestError) as raised:
        smoke.smoke_test(staged_destination, work_dir=new_path / "work")

    assert raised.value.exit_code == 128
    assert "clone" in raised.value.command


def test_smoke_test_timeout(new_path, staged_destination, mock_process_run):
    mock_process_run.side_effect = subprocess.TimeoutExpired(["git"], 30)

    with pytest.raises(errors.SmokeTestError) as raised:
        smoke.smoke_test(staged_destination, work_dir=new_path / "work", timeout=30)

    assert raised.value.message == "timed out after 30 seconds"


def test_smoke_test_cannot_execute(new_path, staged_destination, mock_process_run):
    mock_process_run.side_effect = OSError(8, "Exec format error")

    with pytest.raises(errors.SmokeTestError) as raised:
        smoke.smoke_test(staged_destination, work_dir=new_path / "work")

    assert raised.value.message == "Exec format error"
