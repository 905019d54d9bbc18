"""Obtain a candidate executable by download or by a local source build.

Only the two x86 variants have pre-built release artifacts; every other
architecture, ``unknown`` included, is built from source. A failed download
never falls back to a build: the operator has to re-run on purpose.

The build path compiles the tip of the configured stable branch, not the
resolved version tag. The divergence is reported as a warning.
"""

from __future__ import annotations

import http.client
import shutil
import stat
import urllib.error
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from nymclient_core.logging_setup import get_logger

from .errors import BuildFailed, DownloadFailed, ToolchainMissing
from .prompts import Confirm, unattended
from .resolver import SystemProfile
from .versions import ResolvedVersion


log = get_logger("acquire")


class Origin(str, Enum):
    DOWNLOADED = "downloaded"
    BUILT = "built"


@dataclass(frozen=True)
class Artifact:
    path: Path
    origin: Origin


class ArtifactHost(Protocol):
    def asset_url(self, version: str, name: str) -> str: ...

    def download(self, version: str, name: str, dest: Path) -> Path: ...

    def fetch_manifest(self, version: str) -> str: ...


class Toolchain(Protocol):
    def is_available(self) -> bool: ...

    def version(self) -> str | None: ...

    def install(self) -> bool: ...

    def update(self) -> bool: ...


class SourceBuilder(Protocol):
    def clone(self, url: str, dest: Path) -> bool: ...

    def checkout(self, repo_dir: Path, branch: str) -> bool: ...

    def build(self, repo_dir: Path, binary: str) -> Path: ...


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class ArtifactAcquirer:
    def __init__(
        self,
        host: ArtifactHost,
        toolchain: Toolchain,
        builder: SourceBuilder,
        binary_name: str = "nym-client",
        git_url: str = "https://github.com/nymtech/nym.git",
        branch: str = "master",
        confirm: Confirm = unattended,
    ) -> None:
        self.host = host
        self.toolchain = toolchain
        self.builder = builder
        self.binary_name = binary_name
        self.git_url = git_url
        self.branch = branch
        self.confirm = confirm

    def acquire(self, profile: SystemProfile, version: ResolvedVersion, workspace: Path) -> Artifact:
        if profile.has_prebuilt:
            log.info(f"using pre-compiled binary for {profile.arch.value}")
            return self._download(version, workspace)
        log.info(f"architecture {profile.arch.value} requires building from source")
        return self._build(profile, workspace)

    def _download(self, version: ResolvedVersion, workspace: Path) -> Artifact:
        output = workspace / self.binary_name
        url = self.host.asset_url(version.tag, self.binary_name)
        log.info(f"downloading {self.binary_name} {version} from {url}")
        try:
            self.host.download(version.tag, self.binary_name, output)
        except urllib.error.HTTPError as exc:
            raise DownloadFailed(f"download of {url} failed: HTTP {exc.code}") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise DownloadFailed(f"download of {url} failed: {exc}") from exc

        if not output.is_file():
            raise DownloadFailed(f"download of {url} produced no file")
        make_executable(output)
        return Artifact(path=output, origin=Origin.DOWNLOADED)

    def ensure_toolchain(self) -> None:
        if not self.toolchain.is_available():
            log.info("Rust toolchain not found")
            if not self.confirm("Do you want to install Rust?", True):
                raise ToolchainMissing("Rust is required to build from source")
            log.info("installing Rust toolchain")
            if not self.toolchain.install():
                raise ToolchainMissing("Rust toolchain installation failed")
            log.info("Rust installed successfully")
            return

        log.info(f"Rust found: {self.toolchain.version() or 'unknown version'}")
        if self.confirm("Do you want to update Rust toolchain?", True):
            log.info("updating Rust toolchain")
            if self.toolchain.update():
                log.info("Rust updated successfully")
            else:
                log.warning("Rust toolchain update failed, continuing with the installed toolchain")

    def _build(self, profile: SystemProfile, workspace: Path) -> Artifact:
        log.info(f"building {self.binary_name} from source for {profile.arch.value}")
        self.ensure_toolchain()

        checkout = workspace / "src"
        log.info(f"cloning {self.git_url}")
        if not self.builder.clone(self.git_url, checkout):
            raise BuildFailed(f"git clone of {self.git_url} failed")

        log.warning(
            f"source builds use the tip of branch '{self.branch}', not the requested release tag",
            extra={"event": "build_branch_divergence"},
        )
        if not self.builder.checkout(checkout, self.branch):
            raise BuildFailed(f"git checkout of branch {self.branch} failed")

        log.info(f"building {self.binary_name} (this will take several minutes)")
        built = self.builder.build(checkout, self.binary_name)
        # The build tool's exit status is not trusted; the output file is.
        if not built.is_file():
            raise BuildFailed(f"build did not produce {built}")

        output = workspace / self.binary_name
        try:
            shutil.copyfile(built, output)
            make_executable(output)
        except OSError as exc:
            raise BuildFailed(f"could not stage built binary: {exc}") from exc
        log.info("build successful")
        return Artifact(path=output, origin=Origin.BUILT)
