"""Shared fixtures: a scripted executor and small ROS source trees."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from bloom_release.executor import CommandResult, Executor
from bloom_release.models import RunConfig
from bloom_release.rosdep import Rosdep


@dataclass
class Call:
    args: list[str]
    cwd: Path
    sources: list[Path] = field(default_factory=list)


class FakeExecutor(Executor):
    """Executor that records calls and answers from a table of handlers.

    Handlers are keyed by a command prefix tuple; the longest matching prefix
    wins. A handler is either an exit code or a callable ``(args, cwd)`` that
    may touch the filesystem and returns an exit code (None means 0).
    """

    def __init__(self, handlers=None):
        self.handlers = dict(handlers or {})
        self.calls: list[Call] = []

    def run(self, args, cwd, sources=()):
        args = list(args)
        cwd = Path(cwd)
        self.calls.append(Call(args, cwd, list(sources)))

        handler = 0
        best = -1
        for prefix, candidate in self.handlers.items():
            if tuple(args[: len(prefix)]) == prefix and len(prefix) > best:
                handler, best = candidate, len(prefix)

        returncode = handler(args, cwd) if callable(handler) else handler
        return CommandResult(args, returncode or 0)

    def commands(self, *prefix):
        """Calls whose arguments start with the given prefix."""
        return [c for c in self.calls if tuple(c.args[: len(prefix)]) == prefix]


def generate_debian(args, cwd):
    (cwd / "debian").mkdir()
    (cwd / "debian" / "rules").write_text("#!/usr/bin/make -f\n")


def build_deb(args, cwd):
    # debian/rules writes packages next to the source directory
    deb = cwd.parent / f"ros-humble-{cwd.name.replace('_', '-')}_0.1.0-0jammy_amd64.deb"
    deb.write_bytes(b"!<arch>\n")


def make_package(root: Path, name: str) -> Path:
    pkg = root / name
    pkg.mkdir(parents=True)
    (pkg / "package.xml").write_text(f"<package><name>{name}</name></package>\n")
    (pkg / "CMakeLists.txt").write_text(f"project({name})\n")
    return pkg


@pytest.fixture
def bloom_executor():
    """Executor whose bloom and fakeroot calls behave like a successful build."""
    return FakeExecutor({
        ("bloom-generate",): generate_debian,
        ("fakeroot",): build_deb,
    })


@pytest.fixture
def source_tree(tmp_path):
    """Three packages under <tmp>/src."""
    src = tmp_path / "src"
    for name in ("core", "drivers", "msgs"):
        make_package(src, name)
    return src


@pytest.fixture
def config(tmp_path, source_tree):
    return RunConfig(
        ros_distro="humble",
        debian_distro="jammy",
        packages_dir=source_tree,
        working_dir=tmp_path / "work",
    )


@pytest.fixture
def sources_list(tmp_path):
    path = tmp_path / "20-default.list"
    path.write_text("yaml https://example.invalid/base.yaml\n")
    return path


@pytest.fixture
def make_rosdep(sources_list):
    def factory(executor, distro="humble"):
        return Rosdep(executor, distro, sources_list=sources_list)
    return factory
