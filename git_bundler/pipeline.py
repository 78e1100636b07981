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

"""The ordered build-and-release pipeline."""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from git_bundler import assembler, audit, errors, layout, smoke, sources, toolchain
from git_bundler.builders import (
    CurlBuilder,
    DependencyBuilder,
    GitBuilder,
    OpenSSLBuilder,
    ZlibBuilder,
)
from git_bundler.config import BuildConfig
from git_bundler.manifest import ArtifactDescriptor, DependencyManifest

logger = logging.getLogger(__name__)


@enum.unique
class Stage(enum.IntEnum):
    """The pipeline stages, in execution order."""

    BUILD_ZLIB = 1
    BUILD_OPENSSL = 2
    BUILD_CURL = 3
    BUILD_GIT = 4
    BUNDLE_GIT_LFS = 5
    ADD_CA_BUNDLE = 6
    REMOVE_PROGRAMS = 7
    VALIDATE_LAYOUT = 8
    AUDIT_LINKAGE = 9
    SMOKE_TEST = 10

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.{self.name}"

    @property
    def label(self) -> str:
        """A human-readable stage name."""
        return self.name.lower().replace("_", "-")


@enum.unique
class StageStatus(enum.Enum):
    """How a stage ended.

    ``RUN``: the stage did its work.

    ``SKIPPED``: the stage had nothing to do.

    ``DEGRADED``: a non-fatal stage failed and the pipeline went on.
    """

    RUN = "run"
    SKIPPED = "skipped"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class StageOutcome:
    """The result of running one stage."""

    stage: Stage
    status: StageStatus = StageStatus.RUN
    message: str | None = None


@dataclass
class PipelineReport:
    """The outcomes of all stages of a completed run."""

    outcomes: list[StageOutcome] = field(default_factory=list)

    def get(self, stage: Stage) -> StageOutcome | None:
        """Obtain the outcome of the given stage, if it ran."""
        for outcome in self.outcomes:
            if outcome.stage == stage:
                return outcome
        return None

    @property
    def degraded(self) -> list[StageOutcome]:
        """The non-fatal stages that failed."""
        return [o for o in self.outcomes if o.status == StageStatus.DEGRADED]


@dataclass(frozen=True)
class StageDefinition:
    """A pipeline stage.

    :param stage: The stage identifier.
    :param handler: The function doing the stage work.
    :param description: What the stage does, for planning output.
    :param fatal: Whether a failure of this stage aborts the run.
    """

    stage: Stage
    handler: Callable[[], StageOutcome]
    description: str
    fatal: bool = True


class Pipeline:
    """Build, assemble and verify a Git bundle for one target architecture.

    The toolchain is resolved when the pipeline is created, so an
    unsupported architecture fails before any stage runs. Stages run in
    order; the first failing fatal stage aborts the run by raising its
    error.

    :param config: The build configuration.
    :param force: Rebuild dependency libraries even if their prefixes are
        up to date.
    :param run_smoke_test: Whether to run the smoke test stage.
    :param verbose: Log build output at info level.
    :param host_arch: The host architecture, detected if not given.

    :raise UnsupportedArchitecture: If the target architecture is unknown.
    """

    def __init__(
        self,
        config: BuildConfig,
        *,
        force: bool = False,
        run_smoke_test: bool = True,
        verbose: bool = False,
        host_arch: str | None = None,
    ) -> None:
        self._config = config
        self._target = toolchain.resolve_target(config.target_arch)
        self._force = force
        self._run_smoke_test = run_smoke_test
        self._verbose = verbose
        self._host_arch = host_arch or toolchain.get_host_architecture()
        self._cache = sources.FileCache(config.cache_dir)
        self._assembler = assembler.BundleAssembler(
            destination=config.destination,
            target=self._target,
            work_dir=config.work_dir,
            download_timeout=config.download_timeout,
        )
        self._git_lfs: ArtifactDescriptor | None = None

        libs = config.libraries
        self._stages = [
            StageDefinition(
                Stage.BUILD_ZLIB,
                self._build_zlib,
                f"Build zlib {libs['zlib'].version} into {config.zlib_install_dir}",
            ),
            StageDefinition(
                Stage.BUILD_OPENSSL,
                self._build_openssl,
                f"Build OpenSSL {libs['openssl'].version} "
                f"into {config.openssl_install_dir}",
            ),
            StageDefinition(
                Stage.BUILD_CURL,
                self._build_curl,
                f"Build curl {libs['curl'].version} into {config.curl_install_dir}",
            ),
            StageDefinition(
                Stage.BUILD_GIT,
                self._build_git,
                f"Build git from {config.source} into {config.destination}",
            ),
            StageDefinition(
                Stage.BUNDLE_GIT_LFS,
                self._bundle_git_lfs,
                "Bundle Git LFS if a version is configured",
            ),
            StageDefinition(
                Stage.ADD_CA_BUNDLE,
                self._add_ca_bundle,
                "Add the CA certificate bundle",
                fatal=False,
            ),
            StageDefinition(
                Stage.REMOVE_PROGRAMS,
                self._remove_programs,
                "Remove server-side and unsupported programs",
            ),
            StageDefinition(
                Stage.VALIDATE_LAYOUT,
                self._validate_layout,
                "Validate the bundle layout",
            ),
            StageDefinition(
                Stage.AUDIT_LINKAGE,
                self._audit_linkage,
                "Report unexpected dynamic linking",
                fatal=False,
            ),
            StageDefinition(
                Stage.SMOKE_TEST,
                self._smoke_test,
                f"Clone a repository with the new binary ({self._target.architecture} "
                "hosts only)",
            ),
        ]

    @property
    def target(self) -> toolchain.BuildTarget:
        """The resolved cross-compilation profile."""
        return self._target

    @property
    def stages(self) -> list[StageDefinition]:
        """The stage definitions, in execution order."""
        return list(self._stages)

    def plan(self) -> list[str]:
        """Describe the stages that would run."""
        return [
            f"{definition.stage.label}: {definition.description}"
            for definition in self._stages
        ]

    def run(self) -> PipelineReport:
        """Run all stages in order.

        :return: The outcome of every stage.

        :raise BundlerError: The error of the first failing fatal stage.
        """
        self._config.work_dir.mkdir(parents=True, exist_ok=True)
        report = PipelineReport()

        for definition in self._stages:
            logger.debug("running stage %s", definition.stage.label)
            try:
                outcome = definition.handler()
            except errors.BundlerError as err:
                if definition.fatal:
                    logger.debug("stage %s failed: %s", definition.stage.label, err)
                    raise
                logger.warning("%s", err.brief)
                outcome = StageOutcome(
                    definition.stage, StageStatus.DEGRADED, err.brief
                )
            report.outcomes.append(outcome)

        self._log_summary(report)
        return report

    def _dependency_builder_args(self, name: str) -> dict:
        config = self._config
        return {
            "library": config.libraries[name],
            "install_dir": config.install_dirs[name],
            "work_dir": config.work_dir,
            "target": self._target,
            "cache": self._cache,
            "download_timeout": config.download_timeout,
            "parallel_build_count": config.parallel_build_count,
            "timeout": config.build_timeout,
            "verbose": self._verbose,
        }

    def _run_dependency_builder(
        self, stage: Stage, builder: DependencyBuilder
    ) -> StageOutcome:
        outcome = builder.build(force=self._force)
        if outcome.skipped:
            return StageOutcome(stage, StageStatus.SKIPPED, "already up to date")
        return StageOutcome(stage)

    def _build_zlib(self) -> StageOutcome:
        builder = ZlibBuilder(**self._dependency_builder_args("zlib"))
        return self._run_dependency_builder(Stage.BUILD_ZLIB, builder)

    def _build_openssl(self) -> StageOutcome:
        builder = OpenSSLBuilder(**self._dependency_builder_args("openssl"))
        return self._run_dependency_builder(Stage.BUILD_OPENSSL, builder)

    def _build_curl(self) -> StageOutcome:
        builder = CurlBuilder(
            zlib_dir=self._config.zlib_install_dir,
            openssl_dir=self._config.openssl_install_dir,
            **self._dependency_builder_args("curl"),
        )
        return self._run_dependency_builder(Stage.BUILD_CURL, builder)

    def _build_git(self) -> StageOutcome:
        config = self._config
        builder = GitBuilder(
            source_dir=config.source,
            destination=config.destination,
            zlib_dir=config.zlib_install_dir,
            openssl_dir=config.openssl_install_dir,
            curl_dir=config.curl_install_dir,
            target=self._target,
            parallel_build_count=config.parallel_build_count,
            timeout=config.build_timeout,
            verbose=self._verbose,
        )
        builder.build()
        return StageOutcome(Stage.BUILD_GIT)

    def _load_manifest(self) -> DependencyManifest | None:
        path = self._config.manifest
        if not path.exists() and not self._config.git_lfs_version:
            logger.debug("no dependency manifest at %s", path)
            return None
        return DependencyManifest.load(path)

    def _bundle_git_lfs(self) -> StageOutcome:
        manifest = self._load_manifest()
        version = assembler.resolve_git_lfs_version(
            self._config.git_lfs_version, manifest
        )
        self._git_lfs = self._assembler.merge_git_lfs(manifest, version=version)
        if self._git_lfs is None:
            return StageOutcome(
                Stage.BUNDLE_GIT_LFS, StageStatus.SKIPPED, "no Git LFS version set"
            )
        return StageOutcome(
            Stage.BUNDLE_GIT_LFS, message=f"Git LFS {self._git_lfs.version}"
        )

    def _add_ca_bundle(self) -> StageOutcome:
        self._assembler.add_ca_bundle()
        return StageOutcome(Stage.ADD_CA_BUNDLE)

    def _remove_programs(self) -> StageOutcome:
        removed = self._assembler.remove_programs()
        return StageOutcome(
            Stage.REMOVE_PROGRAMS, message=f"{len(removed)} programs removed"
        )

    def _validate_layout(self) -> StageOutcome:
        expected = layout.bundle_layout(git_lfs=self._git_lfs is not None)
        expected.validate(self._config.destination)
        return StageOutcome(Stage.VALIDATE_LAYOUT)

    def _audit_linkage(self) -> StageOutcome:
        linkage = audit.audit(self._config.destination)
        if linkage.clean:
            return StageOutcome(Stage.AUDIT_LINKAGE)

        count = len(linkage.findings) + len(linkage.problems)
        return StageOutcome(
            Stage.AUDIT_LINKAGE,
            StageStatus.DEGRADED,
            f"{count} static linking issues reported",
        )

    def _smoke_test(self) -> StageOutcome:
        if not self._run_smoke_test:
            return StageOutcome(
                Stage.SMOKE_TEST, StageStatus.SKIPPED, "disabled by request"
            )

        if not smoke.can_run_on_host(self._target, self._host_arch):
            return StageOutcome(
                Stage.SMOKE_TEST,
                StageStatus.SKIPPED,
                f"{self._target.architecture} binaries cannot run "
                f"on {self._host_arch} hosts",
            )

        smoke.smoke_test(
            self._config.destination,
            work_dir=self._config.work_dir,
            timeout=self._config.download_timeout,
            verbose=self._verbose,
        )
        return StageOutcome(Stage.SMOKE_TEST)

    def _log_summary(self, report: PipelineReport) -> None:
        ca_bundle = report.get(Stage.ADD_CA_BUNDLE)
        if ca_bundle and ca_bundle.status == StageStatus.DEGRADED:
            logger.warning(
                "-- Skipped bundling of CA certificates (failed to download them)"
            )

        for outcome in report.outcomes:
            suffix = f" ({outcome.message})" if outcome.message else ""
            logger.info("%s: %s%s", outcome.stage.label, outcome.status.value, suffix)
