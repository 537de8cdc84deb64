"""Combined catkin/colcon build of every selected package."""

from collections.abc import Sequence
from pathlib import Path

from . import log
from .constants import CATKIN_OVERLAY_SETUP, COLCON_OVERLAY_SETUP
from .errors import StagingError, WorkspaceBuildFailed
from .executor import Executor
from .models import RunConfig, Unit
from .rosdep import Rosdep
from .staging import WorkspaceStager

# (build command, overlay setup file relative to the workspace root)
BUILD_PROFILES = {
    1: (["catkin_make"], CATKIN_OVERLAY_SETUP),
    2: (["colcon", "build", "--symlink-install"], COLCON_OVERLAY_SETUP),
}


class WorkspaceBuilder:
    """Builds all packages together so inter-package dependencies resolve."""

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

    def build(self, units: Sequence[Unit]) -> Path:
        """
        Stage and build the workspace.

        Returns:
            Path of the overlay setup file to source for later packaging

        Raises:
            WorkspaceBuildFailed: staging or the build tool failed
        """
        log.section("Building workspace with all packages")

        try:
            root = self.stager.stage_combined(units)
        except StagingError as e:
            raise WorkspaceBuildFailed(str(e)) from e

        log.info("Installing workspace dependencies...")
        self.rosdep.install("src", cwd=root, sources=self.sources)

        command, overlay = BUILD_PROFILES[self.config.ros_version]
        log.info(f"Detected ROS {self.config.ros_version}")
        log.info("Building workspace...")
        result = self.executor.run(command, cwd=root, sources=self.sources)
        if not result.success:
            raise WorkspaceBuildFailed("Workspace build failed")

        log.info("Workspace built successfully")
        return root / overlay
