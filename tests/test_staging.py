"""Tests for WorkspaceStager."""

import pytest

from bloom_release.errors import StagingError
from bloom_release.models import Unit
from bloom_release.staging import WorkspaceStager

from conftest import FakeExecutor, make_package


@pytest.fixture
def stager(tmp_path):
    executor = FakeExecutor()
    return WorkspaceStager(executor, tmp_path / "work" / "bloom", tmp_path / "work" / "workspace")


def _tree(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


class TestStageUnit:
    """Tests for per-package staging."""

    def test_layout(self, tmp_path, stager):
        unit = Unit(make_package(tmp_path / "src", "core"))

        staged = stager.stage_unit(unit)

        assert staged.workspace == tmp_path / "work" / "bloom" / "core"
        assert staged.source == staged.workspace / "core"
        assert (staged.source / "package.xml").is_file()
        assert (staged.source / "CMakeLists.txt").is_file()

    def test_initializes_git_repository(self, tmp_path, stager):
        unit = Unit(make_package(tmp_path / "src", "core"))

        staged = stager.stage_unit(unit)

        calls = stager.executor.calls
        assert calls[0].args == ["git", "init", "-q"]
        assert all(c.cwd == staged.source for c in calls)
        assert ["git", "config", "user.name", "Bloom Release Bot"] in [c.args for c in calls]

    def test_restaging_discards_previous_contents(self, tmp_path, stager):
        """Test that staging twice gives the same tree as staging once."""
        unit = Unit(make_package(tmp_path / "src", "core"))
        first = stager.stage_unit(unit)
        expected = _tree(first.workspace)
        (first.source / "debian").mkdir()
        (first.workspace / "old.deb").write_bytes(b"stale")

        second = stager.stage_unit(unit)

        assert _tree(second.workspace) == expected
        assert not (second.workspace / "old.deb").exists()

    def test_source_tree_untouched(self, tmp_path, stager):
        pkg = make_package(tmp_path / "src", "core")
        before = _tree(pkg)

        staged = stager.stage_unit(Unit(pkg))
        (staged.source / "debian").mkdir()

        assert _tree(pkg) == before

    def test_git_failure_raises(self, tmp_path):
        stager = WorkspaceStager(
            FakeExecutor({("git", "init"): 128}), tmp_path / "bloom", tmp_path / "ws"
        )
        with pytest.raises(StagingError, match="git init"):
            stager.stage_unit(Unit(make_package(tmp_path / "src", "core")))

    def test_missing_source_raises(self, tmp_path, stager):
        with pytest.raises(StagingError):
            stager.stage_unit(Unit(tmp_path / "src" / "gone"))


class TestStageCombined:
    """Tests for combined workspace staging."""

    def test_layout(self, tmp_path, stager):
        units = [Unit(make_package(tmp_path / "src", n)) for n in ("a", "b")]

        root = stager.stage_combined(units)

        assert root == tmp_path / "work" / "workspace"
        assert (root / "src" / "a" / "package.xml").is_file()
        assert (root / "src" / "b" / "package.xml").is_file()
        assert stager.executor.calls == []

    def test_restaging_removes_stale_packages(self, tmp_path, stager):
        a = Unit(make_package(tmp_path / "src", "a"))
        b = Unit(make_package(tmp_path / "src", "b"))
        stager.stage_combined([a, b])

        root = stager.stage_combined([a])

        assert not (root / "src" / "b").exists()

    def test_duplicate_names_raise(self, tmp_path, stager):
        first = Unit(make_package(tmp_path / "one", "core"))
        second = Unit(make_package(tmp_path / "two", "core"))
        with pytest.raises(StagingError, match="share the name"):
            stager.stage_combined([first, second])


class TestWorkingDirInsidePackage:
    """Tests for a package whose directory also holds the working directory."""

    @pytest.fixture
    def repo(self, tmp_path):
        repo = make_package(tmp_path, "my_pkg")
        (repo / "bloom-build" / "output").mkdir(parents=True)
        (repo / "bloom-build" / "output" / "old.deb").write_bytes(b"x")
        return repo

    def _stager(self, repo):
        work = repo / "bloom-build"
        return WorkspaceStager(
            FakeExecutor(), work / "bloom", work / "workspace", exclude=[work]
        )

    def test_stage_unit_skips_working_dir(self, repo):
        staged = self._stager(repo).stage_unit(Unit(repo))

        assert (staged.source / "package.xml").is_file()
        assert not (staged.source / "bloom-build").exists()

    def test_stage_combined_skips_working_dir(self, repo):
        root = self._stager(repo).stage_combined([Unit(repo)])

        assert (root / "src" / "my_pkg" / "package.xml").is_file()
        assert not (root / "src" / "my_pkg" / "bloom-build").exists()

    def test_staging_roots_are_always_skipped(self, repo):
        work = repo / "bloom-build"
        stager = WorkspaceStager(FakeExecutor(), work / "bloom", work / "workspace")

        staged = stager.stage_unit(Unit(repo))

        assert not (staged.source / "bloom-build" / "bloom").exists()
