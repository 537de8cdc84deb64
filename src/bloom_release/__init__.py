"""Multi-package bloom release builder for ROS source trees."""

from .executor import CommandResult, Executor, SubprocessExecutor
from .models import BuildResult, FailureKind, RunConfig, RunReport, Unit
from .runner import ReleaseRunner

__all__ = [
    "BuildResult",
    "CommandResult",
    "Executor",
    "FailureKind",
    "ReleaseRunner",
    "RunConfig",
    "RunReport",
    "SubprocessExecutor",
    "Unit",
]
