"""Exceptions raised by the release builder."""


class BloomReleaseError(Exception):
    """Base class for errors that abort a release run."""

    pass


class ConfigurationError(BloomReleaseError):
    """Required configuration is missing or invalid."""

    pass


class NoUnitsFound(BloomReleaseError):
    """The search directory contains no package descriptor."""

    pass


class NoUnitsSelected(BloomReleaseError):
    """Every discovered package was excluded by the whitelist/blacklist."""

    pass


class RosdepUpdateFailed(BloomReleaseError):
    """rosdep sources could not be updated or verified."""

    pass


class WorkspaceBuildFailed(BloomReleaseError):
    """The combined workspace build failed; no package can be released."""

    pass


class StagingError(BloomReleaseError):
    """A staged copy of a package could not be created."""

    pass


class UnitBuildError(Exception):
    """A single package failed to build.

    Only raised inside UnitBuilder, which turns it into a failed BuildResult.
    """

    def __init__(self, kind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
