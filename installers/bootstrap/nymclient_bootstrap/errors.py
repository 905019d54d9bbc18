"""Stage-scoped failure taxonomy for the install pipeline."""

from __future__ import annotations


class InstallerError(RuntimeError):
    stage = "pipeline"
    exit_code = 1


class ResolutionError(InstallerError):
    stage = "resolve"
    exit_code = 3


class ReleaseUnreachable(ResolutionError):
    pass


class EmptyReleaseTag(ResolutionError):
    pass


class AcquisitionError(InstallerError):
    stage = "acquire"
    exit_code = 4


class DownloadFailed(AcquisitionError):
    pass


class ToolchainMissing(AcquisitionError):
    pass


class BuildFailed(AcquisitionError):
    pass


class InstallError(InstallerError):
    stage = "install"
    exit_code = 5


class IntegrityFailure(InstallError):
    stage = "verify"
    exit_code = 6


class CopyFailed(InstallError):
    pass


class SmokeCheckFailed(InstallError):
    pass


class InstallCancelled(InstallerError):
    """The operator declined to continue; not a failure."""

    exit_code = 0
