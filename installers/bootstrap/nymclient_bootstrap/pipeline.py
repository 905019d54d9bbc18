"""One install run: detect, resolve, acquire, verify, install."""

from __future__ import annotations

import os
import platform
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from nymclient_core.config import InstallerConfig
from nymclient_core.http import build_ssl_context
from nymclient_core.logging_setup import get_logger
from nymclient_core.releases import ReleaseService

from .acquire import Artifact, ArtifactAcquirer, ArtifactHost, Origin, SourceBuilder, Toolchain
from .errors import InstallCancelled
from .installer import InstallationRecord, Installer
from .integrity import IntegrityVerifier, ManifestSource, VerificationVerdict
from .prompts import Confirm, unattended
from .resolver import SystemProfile, detect
from .service import ReleaseArtifactHost
from .toolchain import GitCargoBuilder, RustToolchain
from .versions import LATEST, ReleaseMetadata, ResolvedVersion, VersionResolver


@dataclass(frozen=True)
class InstallOutcome:
    profile: SystemProfile
    version: ResolvedVersion
    origin: Origin
    verdict: VerificationVerdict | None
    record: InstallationRecord
    on_path: bool


def path_contains(directory: Path, path_env: str | None = None) -> bool:
    entries = (path_env if path_env is not None else os.environ.get("PATH", "")).split(os.pathsep)
    target = os.path.normcase(os.path.abspath(directory))
    return any(e and os.path.normcase(os.path.abspath(os.path.expanduser(e))) == target for e in entries)


class InstallPipeline:
    def __init__(
        self,
        config: InstallerConfig,
        confirm: Confirm = unattended,
        metadata: ReleaseMetadata | None = None,
        host: ArtifactHost | None = None,
        manifests: ManifestSource | None = None,
        toolchain: Toolchain | None = None,
        builder: SourceBuilder | None = None,
        detector: Callable[[], SystemProfile] = detect,
        installer: Installer | None = None,
    ) -> None:
        self.config = config
        self.confirm = confirm
        src = config.source
        net = config.network

        if metadata is None or host is None:
            context = build_ssl_context(net.ca_bundle, net.allow_insecure_tls)
            metadata = metadata or ReleaseService(timeout_s=net.timeout_s, context=context)
            host = host or ReleaseArtifactHost(
                repo=src.repo,
                tag_prefix=src.tag_prefix,
                manifest_name=src.manifest_name,
                timeout_s=max(net.timeout_s, 180),
                context=context,
            )

        self.detector = detector
        self.resolver = VersionResolver(metadata, repo=src.repo, tag_prefix=src.tag_prefix)
        self.acquirer = ArtifactAcquirer(
            host=host,
            toolchain=toolchain or RustToolchain(),
            builder=builder or GitCargoBuilder(),
            binary_name=src.binary_name,
            git_url=src.git_url,
            branch=src.branch,
            confirm=confirm,
        )
        self.verifier = IntegrityVerifier(manifests or host)
        self.installer = installer or Installer(binary_name=src.binary_name)

    def detect(self) -> SystemProfile:
        log = get_logger("detect")
        profile = self.detector()
        log.info(f"detected system: {profile.os_name.value} ({profile.arch.value})")
        log.debug(f"uname: {' '.join(platform.uname())}")
        return profile

    def resolve(self, spec: str) -> ResolvedVersion:
        log = get_logger("resolve")
        if spec.strip() == LATEST:
            log.info("fetching latest version information")
        version = self.resolver.resolve(spec)
        log.info(f"using version: {version}")
        return version

    def verify(self, artifact: Artifact, version: ResolvedVersion) -> VerificationVerdict | None:
        if artifact.origin is not Origin.DOWNLOADED:
            return None
        return self.verifier.verify(artifact, version)

    def check_existing(self) -> None:
        log = get_logger("pipeline")
        name = self.config.source.binary_name
        existing = shutil.which(name)
        if existing is None or self.config.install.force:
            return
        log.info(f"{name} is already installed at {existing}")
        if not self.confirm(f"{name} is already installed. Install anyway?", False):
            raise InstallCancelled("installation cancelled")

    def run(self, version_spec: str | None = None, destination: Path | None = None) -> InstallOutcome:
        log = get_logger("pipeline")
        spec = version_spec or self.config.install.version
        destination = destination or self.config.destination()
        name = self.config.source.binary_name

        self.check_existing()

        with tempfile.TemporaryDirectory(prefix=f"{name}-install-") as tmp:
            log.info(f"starting {name} installation")
            profile = self.detect()
            version = self.resolve(spec)
            artifact = self.acquirer.acquire(profile, version, Path(tmp))
            verdict = self.verify(artifact, version)
            record = self.installer.install(artifact, destination, verdict)

        on_path = path_contains(destination)
        if not on_path:
            log.warning(f"{destination} is not in your PATH")
            log.info(f'add it with: export PATH="{destination}:$PATH"')
        log.info(f"to initialize a client: {record.path} init --id YOUR_CLIENT_ID")
        log.info(f"to run a client: {record.path} run --id YOUR_CLIENT_ID")

        return InstallOutcome(
            profile=profile,
            version=version,
            origin=artifact.origin,
            verdict=verdict,
            record=record,
            on_path=on_path,
        )
