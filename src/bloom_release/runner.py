"""Orchestration of a full release run and aggregation of its results."""

from collections.abc import Sequence
from pathlib import Path

from . import log
from .constants import ARTIFACT_GLOB
from .discovery import build_matchers, discover_units, filter_units
from .executor import Executor
from .models import BuildResult, RunConfig, RunReport, Unit
from .rosdep import Rosdep
from .staging import WorkspaceStager
from .unit_builder import UnitBuilder
from .workspace_builder import WorkspaceBuilder


def summarize(results: Sequence[BuildResult], artifacts: Sequence[Path]) -> RunReport:
    """Reduce per-package results and the output directory listing to a report."""
    succeeded = sum(1 for r in results if r.success)
    return RunReport(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        artifacts=list(artifacts),
        results=list(results),
    )


def collect_output_artifacts(output_dir: Path) -> list[Path]:
    """List the binary packages present in the output directory."""
    if not output_dir.is_dir():
        return []
    return sorted(p for p in output_dir.glob(ARTIFACT_GLOB) if p.is_file())


def collect_run_artifacts(results: Sequence[BuildResult], output_dir: Path) -> list[Path]:
    """Artifacts copied by this run that are still present in output_dir."""
    artifacts = {
        p.name: p
        for r in results
        for p in r.artifacts
        if p.parent == output_dir and p.is_file()
    }
    return [artifacts[name] for name in sorted(artifacts)]


def _existing(paths: Sequence[Path]) -> list[Path]:
    return [p for p in paths if p.is_file()]


class ReleaseRunner:
    """Discover, filter, build, and package ROS packages in one run."""

    def __init__(
        self,
        config: RunConfig,
        executor: Executor,
        rosdep: Rosdep | None = None,
        cwd: Path | None = None,
    ):
        self.config = config
        self.executor = executor
        self.rosdep = rosdep or Rosdep(executor, config.ros_distro)
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.stager = WorkspaceStager(
            executor,
            config.bloom_root,
            config.workspace_root,
            exclude=[config.working_dir, config.output_dir],
        )

    def select_units(self) -> list[Unit]:
        """Discover packages and apply the whitelist/blacklist."""
        whitelist, blacklist = build_matchers(self.config.whitelist, self.config.blacklist)
        units = discover_units(
            self.config.search_dir(self.cwd),
            exclude=[self.config.working_dir],
        )
        return filter_units(units, whitelist, blacklist)

    def run(self) -> RunReport:
        """
        Execute the whole run.

        Raises:
            BloomReleaseError: a precondition or run-scoped step failed; no
                report is produced in that case
        """
        config = self.config
        units = self.select_units()

        log.section(f"Processing {len(units)} package(s)")
        config.working_dir.mkdir(parents=True, exist_ok=True)
        config.output_dir.mkdir(parents=True, exist_ok=True)
        log.info(f"Working directory: {config.working_dir}")

        # The final artifact check must only see packages built by this run.
        # A user-supplied output directory may hold files we do not own.
        if config.owns_output_dir:
            for stale in collect_output_artifacts(config.output_dir):
                log.warn(f"Removing artifact from a previous run: {stale.name}")
                stale.unlink()

        self.rosdep.initialize(cwd=config.working_dir)

        sources = _existing([config.underlay_setup])
        if config.workspace_mode:
            workspace = WorkspaceBuilder(config, self.executor, self.stager, self.rosdep, sources)
            overlay = workspace.build(units)
            sources = sources + _existing([overlay])

        builder = UnitBuilder(config, self.executor, self.stager, self.rosdep, sources)
        results = [
            builder.build(unit, index, len(units))
            for index, unit in enumerate(units, 1)
        ]

        if config.owns_output_dir:
            artifacts = collect_output_artifacts(config.output_dir)
        else:
            artifacts = collect_run_artifacts(results, config.output_dir)
        report = summarize(results, artifacts)
        self._log_summary(report)
        return report

    def _log_summary(self, report: RunReport) -> None:
        log.section("Build Summary")
        log.info(f"Total packages: {report.total}")
        log.info(f"Successful: {report.succeeded}")
        log.info(f"Failed: {report.failed}")
        for result in report.results:
            if not result.success:
                log.error(f"  - {result.unit.name}: {result.message}")

        if not report.artifacts:
            log.error("No debian packages were generated!")
            return

        log.section("Generated Debian Packages")
        for artifact in report.artifacts:
            log.info(f"  - {artifact.name}")

        if report.failed:
            log.warn("Some packages failed to build")
        else:
            log.info("All builds completed successfully!")
