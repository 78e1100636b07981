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

import io
import os
import tarfile
from pathlib import Path

import pytest
import xdg  # type: ignore[import]
from git_bundler import layout, toolchain
from git_bundler.config import BuildConfig


@pytest.fixture(scope="session")
def host_arch() -> str:
    return toolchain.get_host_architecture()


@pytest.fixture
def new_dir(monkeypatch, tmpdir):
    """Change to a new temporary directory."""
    monkeypatch.chdir(tmpdir)
    return tmpdir


@pytest.fixture
def new_path(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def temp_xdg(tmpdir, mocker):
    """Use a temporary location for XDG directories."""

    mocker.patch(
        "xdg.BaseDirectory.xdg_config_home",
        new=os.path.join(tmpdir, ".config"),  # noqa: PTH118
    )
    mocker.patch("xdg.BaseDirectory.xdg_data_home", new=os.path.join(tmpdir, ".local"))  # noqa: PTH118
    mocker.patch("xdg.BaseDirectory.xdg_cache_home", new=os.path.join(tmpdir, ".cache"))  # noqa: PTH118
    mocker.patch(
        "xdg.BaseDirectory.xdg_config_dirs",
        new=[
            xdg.BaseDirectory.xdg_config_home  # pyright: ignore[reportGeneralTypeIssues]
        ],
    )


@pytest.fixture
def x64_target() -> toolchain.BuildTarget:
    return toolchain.resolve_target("x64")


@pytest.fixture
def arm64_target() -> toolchain.BuildTarget:
    return toolchain.resolve_target("arm64")


@pytest.fixture
def make_tarball():
    """Return a function that writes a gzipped tarball with the given files."""

    def _make_tarball(path: Path, files: dict[str, bytes]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(path, "w:gz") as tar:
            for name, content in files.items():
                info = tarfile.TarInfo(name)
                info.size = len(content)
                info.mode = 0o555
                tar.addfile(info, io.BytesIO(content))
        return path

    return _make_tarball


@pytest.fixture
def staged_destination(new_path) -> Path:
    """A destination tree as left behind by installing Git."""
    destination = new_path / "destination"
    for program in (layout.GIT_EXECUTABLE, *layout.REMOVED_PROGRAMS):
        path = destination / program
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x7fELF program")
    (destination / layout.TEMPLATE_DIR).mkdir(parents=True)
    return destination


@pytest.fixture
def required_environment(new_path) -> dict[str, str]:
    """The required build variables, pointing into a temporary directory."""
    return {
        "SOURCE": str(new_path / "git"),
        "DESTINATION": str(new_path / "destination"),
        "CURL_INSTALL_DIR": str(new_path / "curl"),
        "ZLIB_INSTALL_DIR": str(new_path / "zlib"),
        "OPENSSL_INSTALL_DIR": str(new_path / "openssl"),
        "TARGET_ARCH": "x64",
    }


@pytest.fixture
def build_config(new_path) -> BuildConfig:
    return BuildConfig(
        source=new_path / "git",
        destination=new_path / "destination",
        curl_install_dir=new_path / "curl",
        zlib_install_dir=new_path / "zlib",
        openssl_install_dir=new_path / "openssl",
        target_arch="x64",
        manifest=new_path / "dependencies.json",
        work_dir=new_path / "work",
        cache_dir=new_path / "cache",
        parallel_build_count=2,
    )
