"""Isolated working copies of packages for building."""

import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from . import log
from .constants import GIT_USER_EMAIL, GIT_USER_NAME
from .errors import StagingError
from .executor import Executor
from .models import Unit


@dataclass
class StagedUnit:
    """A package copied into its private workspace.

    ``workspace`` is the packaging staging area owned by this package;
    ``source`` is the copied package tree inside it. debian/rules writes
    binary packages into the parent of ``source``, so they land in
    ``workspace`` and nowhere else.
    """

    unit: Unit
    workspace: Path
    source: Path


def _skip_excluded(exclude: Sequence[Path]):
    """Build a copytree ignore callback that drops excluded directories."""
    excluded = [Path(p).resolve() for p in exclude]

    def ignore(directory, names):
        parent = Path(directory).resolve()
        return {name for name in names if (parent / name) in excluded}

    return ignore


def _copy_tree(src: Path, dest: Path, exclude: Sequence[Path] = ()) -> None:
    try:
        shutil.copytree(src, dest, symlinks=True, ignore=_skip_excluded(exclude))
    except (OSError, shutil.Error) as e:
        raise StagingError(f"Failed to copy {src} to {dest}: {e}") from e


def _reset_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


class WorkspaceStager:
    """Copies packages into fresh directories under the working root."""

    def __init__(
        self,
        executor: Executor,
        bloom_root: Path,
        workspace_root: Path,
        exclude: Sequence[Path] = (),
    ):
        self.executor = executor
        self.bloom_root = Path(bloom_root)
        self.workspace_root = Path(workspace_root)
        # Never copied, even when they sit inside a package (e.g. ./bloom-build)
        self.exclude = [self.bloom_root, self.workspace_root, *exclude]

    def stage_unit(self, unit: Unit) -> StagedUnit:
        """
        Stage one package for packaging.

        Any previous staged copy of a package with the same name is removed
        first, so staging twice gives the same tree as staging once.

        Raises:
            StagingError: copying failed or the git repository could not be
                initialized
        """
        workspace = self.bloom_root / unit.name
        source = workspace / unit.name
        try:
            _reset_dir(workspace)
        except OSError as e:
            raise StagingError(f"Failed to prepare {workspace}: {e}") from e
        _copy_tree(unit.path, source, self.exclude)
        self._init_git(source)
        return StagedUnit(unit=unit, workspace=workspace, source=source)

    def stage_combined(self, units: Sequence[Unit]) -> Path:
        """
        Stage every package into one workspace source tree.

        Returns:
            The workspace root; packages live under ``<root>/src/<name>``

        Raises:
            StagingError: two packages share a directory name, or copying failed
        """
        seen: dict[str, Unit] = {}
        for unit in units:
            if unit.name in seen:
                raise StagingError(
                    f"Packages {seen[unit.name].path} and {unit.path} "
                    f"share the name '{unit.name}'"
                )
            seen[unit.name] = unit

        src_dir = self.workspace_root / "src"
        try:
            if self.workspace_root.exists():
                shutil.rmtree(self.workspace_root)
            src_dir.mkdir(parents=True)
        except OSError as e:
            raise StagingError(f"Failed to prepare {self.workspace_root}: {e}") from e

        log.info("Copying packages into workspace...")
        for unit in units:
            log.info(f"  - {unit.name}")
            _copy_tree(unit.path, src_dir / unit.name, self.exclude)
        return self.workspace_root

    def _init_git(self, source: Path) -> None:
        commands = [
            ["git", "init", "-q"],
            ["git", "config", "user.name", GIT_USER_NAME],
            ["git", "config", "user.email", GIT_USER_EMAIL],
        ]
        for args in commands:
            result = self.executor.run(args, cwd=source)
            if not result.success:
                raise StagingError(
                    f"'{' '.join(args)}' failed in {source} "
                    f"with exit code {result.returncode}"
                )
