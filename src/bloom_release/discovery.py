"""Package discovery and whitelist/blacklist filtering."""

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from . import log
from .constants import DESCRIPTOR_FILE
from .errors import ConfigurationError, NoUnitsFound, NoUnitsSelected
from .models import Unit


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def discover_units(root: Path, exclude: Iterable[Path] = ()) -> list[Unit]:
    """
    Find every directory below root that contains a package descriptor.

    Args:
        root: Directory to search recursively
        exclude: Directories whose contents are skipped (e.g. the working
            directory, which holds staged copies of packages)

    Returns:
        Units sorted by path

    Raises:
        ConfigurationError: root is not a directory
        NoUnitsFound: no descriptor file exists below root
    """
    root = Path(root)
    if not root.is_dir():
        raise ConfigurationError(f"Package search directory not found: {root}")

    log.info(f"Discovering ROS packages in: {root}")
    excluded = [Path(p).resolve() for p in exclude]

    units = []
    for descriptor in root.rglob(DESCRIPTOR_FILE):
        if not descriptor.is_file():
            continue
        package_dir = descriptor.parent
        if any(_is_within(package_dir.resolve(), ex) for ex in excluded):
            continue
        units.append(Unit(package_dir))

    if not units:
        raise NoUnitsFound(f"No ROS packages found in {root}")

    return sorted(units, key=lambda u: str(u.path))


class PatternMatcher:
    """Unanchored regular-expression search against a package path."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        try:
            self._regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e

    def matches(self, path: Path | str) -> bool:
        return self._regex.search(str(path)) is not None

    def __repr__(self) -> str:
        return f"PatternMatcher({self.pattern!r})"


def filter_units(
    units: Sequence[Unit],
    whitelist: PatternMatcher,
    blacklist: PatternMatcher | None = None,
) -> list[Unit]:
    """
    Select the packages to build, keeping discovery order.

    A package must match the whitelist and, when a blacklist is given, must
    not match it.

    Raises:
        NoUnitsSelected: every package was excluded
    """
    selected = []
    for unit in units:
        if not whitelist.matches(unit.path):
            log.info(f"Package at '{unit.path}' excluded by whitelist")
            continue
        if blacklist is not None and blacklist.matches(unit.path):
            log.info(f"Package at '{unit.path}' excluded by blacklist")
            continue
        log.info(f"Found package at: {unit.path}")
        selected.append(unit)

    if not selected:
        raise NoUnitsSelected("No packages matched the whitelist/blacklist filters")

    return selected


def build_matchers(
    whitelist: str, blacklist: str = ""
) -> tuple[PatternMatcher, PatternMatcher | None]:
    """Compile whitelist/blacklist patterns; an empty blacklist disables it."""
    return PatternMatcher(whitelist), (PatternMatcher(blacklist) if blacklist else None)
