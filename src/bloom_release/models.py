"""Data models for a release run."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .constants import (
    BLOOM_SUBDIR,
    DEFAULT_OS_NAME,
    DEFAULT_WHITELIST,
    DEFAULT_WORKING_DIR,
    LEGACY_ROS_DISTROS,
    OUTPUT_SUBDIR,
    ROS_UNDERLAY_SETUP,
    WORKSPACE_SUBDIR,
)
from .errors import ConfigurationError


class FailureKind(str, Enum):
    """Why a single package failed to build."""

    STAGING_FAILED = "staging_failed"
    GENERATION_FAILED = "generation_failed"
    MISSING_BUILD_INSTRUCTIONS = "missing_build_instructions"
    NATIVE_BUILD_FAILED = "native_build_failed"
    NO_ARTIFACTS_PRODUCED = "no_artifacts_produced"


@dataclass(frozen=True)
class Unit:
    """A ROS package directory, identified by its source path."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class RunConfig:
    """Immutable inputs of one release run."""

    ros_distro: str
    debian_distro: str
    packages_dir: Path = Path(".")
    whitelist: str = DEFAULT_WHITELIST
    blacklist: str = ""
    working_dir: Path = Path(DEFAULT_WORKING_DIR)
    output_dir: Path | None = None
    os_name: str = DEFAULT_OS_NAME
    workspace_mode: bool = True
    command_timeout: float | None = None

    def __post_init__(self):
        missing = [
            name for name in ("ros_distro", "debian_distro")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )
        # Normalize paths once so every component sees absolute locations
        working_dir = Path(self.working_dir).expanduser().resolve()
        object.__setattr__(self, "working_dir", working_dir)
        object.__setattr__(self, "packages_dir", Path(self.packages_dir).expanduser())
        if self.output_dir is None:
            object.__setattr__(self, "output_dir", working_dir / OUTPUT_SUBDIR)
        else:
            object.__setattr__(self, "output_dir", Path(self.output_dir).expanduser().resolve())
        if not self.whitelist:
            object.__setattr__(self, "whitelist", DEFAULT_WHITELIST)

    @property
    def ros_version(self) -> int:
        return 1 if self.ros_distro in LEGACY_ROS_DISTROS else 2

    @property
    def bloom_root(self) -> Path:
        return self.working_dir / BLOOM_SUBDIR

    @property
    def workspace_root(self) -> Path:
        return self.working_dir / WORKSPACE_SUBDIR

    @property
    def owns_output_dir(self) -> bool:
        """True when output goes to the default directory inside working_dir."""
        return self.output_dir == self.working_dir / OUTPUT_SUBDIR

    @property
    def underlay_setup(self) -> Path:
        return Path(ROS_UNDERLAY_SETUP.format(distro=self.ros_distro))

    def search_dir(self, cwd: Path | None = None) -> Path:
        """Resolve the package search directory against cwd when relative."""
        if self.packages_dir.is_absolute():
            return self.packages_dir
        return (Path(cwd) if cwd else Path.cwd()) / self.packages_dir


@dataclass
class BuildResult:
    """Outcome of building one package."""

    unit: Unit
    success: bool
    artifacts: list[Path] = field(default_factory=list)
    failure: FailureKind | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.unit.name,
            "path": str(self.unit.path),
            "status": "success" if self.success else "failed",
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
            "artifacts": [p.name for p in self.artifacts],
        }


@dataclass
class RunReport:
    """Aggregated result of a release run."""

    total: int
    succeeded: int
    failed: int
    artifacts: list[Path] = field(default_factory=list)
    results: list[BuildResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if not self.artifacts or self.failed > 0:
            return 1
        return 0

    @property
    def failed_units(self) -> list[Unit]:
        return [r.unit for r in self.results if not r.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "exit_code": self.exit_code,
            "artifacts": [p.name for p in self.artifacts],
            "packages": [r.to_dict() for r in self.results],
        }
