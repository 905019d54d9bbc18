"""Acquisition decision engine for unattended nym-client installs."""

from .acquire import Artifact, ArtifactAcquirer, Origin
from .errors import (
    AcquisitionError,
    BuildFailed,
    CopyFailed,
    DownloadFailed,
    EmptyReleaseTag,
    InstallCancelled,
    InstallError,
    InstallerError,
    IntegrityFailure,
    ReleaseUnreachable,
    ResolutionError,
    SmokeCheckFailed,
    ToolchainMissing,
)
from .installer import InstallationRecord, Installer
from .integrity import HashManifest, IntegrityVerifier, VerdictStatus, VerificationVerdict, parse_manifest
from .pipeline import InstallOutcome, InstallPipeline
from .resolver import Arch, OsName, SystemProfile, detect, resolve_target
from .versions import LATEST, ResolvedVersion, VersionResolver

__all__ = [
    "LATEST",
    "AcquisitionError",
    "Arch",
    "Artifact",
    "ArtifactAcquirer",
    "BuildFailed",
    "CopyFailed",
    "DownloadFailed",
    "EmptyReleaseTag",
    "HashManifest",
    "InstallCancelled",
    "InstallError",
    "InstallOutcome",
    "InstallPipeline",
    "InstallationRecord",
    "Installer",
    "InstallerError",
    "IntegrityFailure",
    "IntegrityVerifier",
    "Origin",
    "OsName",
    "ReleaseUnreachable",
    "ResolutionError",
    "ResolvedVersion",
    "SmokeCheckFailed",
    "SystemProfile",
    "ToolchainMissing",
    "VerdictStatus",
    "VerificationVerdict",
    "VersionResolver",
    "detect",
    "parse_manifest",
    "resolve_target",
]
