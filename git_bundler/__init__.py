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

"""Cross-compile Git and assemble a portable bundle."""

from importlib.metadata import PackageNotFoundError, version

from .config import BuildConfig, load_config
from .errors import BundlerError
from .pipeline import Pipeline, PipelineReport, Stage, StageOutcome, StageStatus
from .toolchain import BuildTarget, resolve_target

try:
    __version__ = version("git-bundler")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "dev"


__all__ = [
    "__version__",
    "BuildConfig",
    "BuildTarget",
    "BundlerError",
    "Pipeline",
    "PipelineReport",
    "Stage",
    "StageOutcome",
    "StageStatus",
    "load_config",
    "resolve_target",
]
