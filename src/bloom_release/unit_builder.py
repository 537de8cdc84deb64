"""Debian packaging of a single ROS package with bloom."""

import shutil
from collections.abc import Sequence
from pathlib import Path

from . import log
from .constants import ARTIFACT_GLOB, BUILD_INSTRUCTIONS_DIR
from .errors import StagingError, UnitBuildError
from .executor import Executor
from .models import BuildResult, FailureKind, RunConfig, Unit
from .rosdep import Rosdep
from .staging import StagedUnit, WorkspaceStager


class UnitBuilder:
    """Generate, build, and collect the Debian packages of one ROS package.

    Every failure is confined to the package being built: ``build`` always
    returns a BuildResult and never raises for a failed package.
    """

    def __init__(
        self,
        config: RunConfig,
        executor: Executor,
        stager: WorkspaceStager,
        rosdep: Rosdep,
        sources: Sequence[Path] = (),
    ):
        self.config = config
        self.executor = executor
        self.stager = stager
        self.rosdep = rosdep
        self.sources = list(sources)

    def build(self, unit: Unit, index: int, total: int) -> BuildResult:
        """
        Build one package.

        Args:
            unit: Package to build
            index: 1-based position in the build set (progress only)
            total: Size of the build set (progress only)
        """
        log.section(f"Generating debian for package {index}/{total}")
        log.info(f"Package: {unit.name}")

        try:
            artifacts = self._build(unit)
        except UnitBuildError as e:
            log.error(e.message)
            return BuildResult(unit=unit, success=False, failure=e.kind, message=e.message)

        log.info(f"Successfully generated debian for {unit.name}")
        return BuildResult(unit=unit, success=True, artifacts=artifacts)

    def _build(self, unit: Unit) -> list[Path]:
        try:
            staged = self.stager.stage_unit(unit)
        except StagingError as e:
            raise UnitBuildError(FailureKind.STAGING_FAILED, str(e)) from e

        self._generate(staged)

        # Missing dependencies often do not block the build
        self.rosdep.install(".", cwd=staged.source, sources=self.sources)

        log.info("Building debian package...")
        if not (staged.source / BUILD_INSTRUCTIONS_DIR).is_dir():
            raise UnitBuildError(
                FailureKind.MISSING_BUILD_INSTRUCTIONS, "Debian directory not found"
            )

        result = self.executor.run(
            ["fakeroot", "debian/rules", "binary"],
            cwd=staged.source,
            sources=self.sources,
        )
        if not result.success:
            raise UnitBuildError(FailureKind.NATIVE_BUILD_FAILED, "Debian build failed")

        found = sorted(p for p in staged.workspace.rglob(ARTIFACT_GLOB) if p.is_file())
        if not found:
            raise UnitBuildError(
                FailureKind.NO_ARTIFACTS_PRODUCED, "No debian packages were generated"
            )

        log.info("Collecting debian packages...")
        return self._collect(found)

    def _generate(self, staged: StagedUnit) -> None:
        log.info("Generating debian files with bloom...")
        args = [
            "bloom-generate", "rosdebian",
            "--os-name", self.config.os_name,
            "--os-version", self.config.debian_distro,
            "--ros-distro", self.config.ros_distro,
        ]
        result = self.executor.run(args, cwd=staged.source, sources=self.sources)
        if not result.success:
            raise UnitBuildError(FailureKind.GENERATION_FAILED, "Bloom generation failed")

    def _collect(self, debs: list[Path]) -> list[Path]:
        output_dir = self.config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        collected = []
        for deb in debs:
            dest = output_dir / deb.name
            # Same file name from two packages: last one wins
            if dest.exists():
                log.warn(f"Overwriting existing artifact: {deb.name}")
            try:
                shutil.copy2(deb, dest)
            except OSError as e:
                raise UnitBuildError(
                    FailureKind.NO_ARTIFACTS_PRODUCED, f"Failed to collect {deb.name}: {e}"
                ) from e
            log.info(f"Generated: {deb.name}")
            collected.append(dest)
        return collected
