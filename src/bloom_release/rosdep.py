"""rosdep source initialization and dependency installation."""

from collections.abc import Sequence
from pathlib import Path

from . import log
from .constants import ROSDEP_SOURCES_LIST
from .errors import RosdepUpdateFailed
from .executor import Executor


class Rosdep:
    """Thin wrapper around the rosdep command line."""

    def __init__(
        self,
        executor: Executor,
        ros_distro: str,
        sources_list: Path | str = ROSDEP_SOURCES_LIST,
        use_sudo: bool = True,
    ):
        self.executor = executor
        self.ros_distro = ros_distro
        self.sources_list = Path(sources_list)
        self.use_sudo = use_sudo

    def initialize(self, cwd: Path) -> None:
        """
        Prepare rosdep sources once per run.

        ``rosdep init`` fails when sources already exist, so its failure is
        only a warning. ``rosdep update`` and the sources check are fatal.

        Raises:
            RosdepUpdateFailed: update failed or sources are missing afterwards
        """
        log.info("Initializing rosdep...")
        init_cmd = ["rosdep", "init"]
        if self.use_sudo:
            init_cmd = ["sudo", *init_cmd]
        if not self.executor.run(init_cmd, cwd=cwd).success:
            log.warn("rosdep already initialized")

        log.info("Updating rosdep...")
        if not self.executor.run(["rosdep", "update"], cwd=cwd).success:
            raise RosdepUpdateFailed("rosdep update failed")

        log.info("Verifying rosdep sources...")
        if not self.sources_list.is_file():
            raise RosdepUpdateFailed(
                f"rosdep sources not found after initialization: {self.sources_list}"
            )

    def install(
        self, from_paths: Path | str, cwd: Path, sources: Sequence[Path] = ()
    ) -> bool:
        """Install build dependencies of the packages under from_paths.

        Best effort: returns False on failure and the caller carries on.
        """
        args = [
            "rosdep", "install",
            "--from-paths", str(from_paths),
            "--ignore-src", "-y", "-r",
            "--rosdistro", self.ros_distro,
        ]
        result = self.executor.run(args, cwd=cwd, sources=sources)
        if not result.success:
            log.warn("Some dependencies could not be installed, continuing...")
        return result.success
