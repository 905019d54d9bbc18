from __future__ import annotations

import hashlib
import json
import os
import sys
import urllib.error
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))

import nymclient_bootstrap.pipeline as pipeline_mod
from nymclient_bootstrap import (
    Arch,
    InstallCancelled,
    InstallPipeline,
    IntegrityFailure,
    Origin,
    OsName,
    SystemProfile,
    VerdictStatus,
)
from nymclient_bootstrap.pipeline import path_contains
from nymclient_core.config import InstallerConfig

pytestmark = pytest.mark.skipif(os.name != "posix", reason="installs a shell script as the binary")

BINARY = b"#!/bin/sh\necho 'nym-client 9.9.9'\n"
DIGEST = hashlib.sha256(BINARY).hexdigest()


class StubMetadata:
    def __init__(self, tag: str = "nym-binaries-v9.9.9") -> None:
        self.tag = tag
        self.calls = 0

    def latest_tag(self, repo: str) -> str | None:
        self.calls += 1
        return self.tag


class StubHost:
    def __init__(self, manifest: str | None = None, manifest_error: Exception | None = None) -> None:
        self.manifest = manifest if manifest is not None else json.dumps({"assets": {"nym-client": {"sha256": DIGEST}}})
        self.manifest_error = manifest_error
        self.downloads: list[Path] = []
        self.manifest_versions: list[str] = []

    def asset_url(self, version: str, name: str) -> str:
        return f"https://example/nym-binaries-{version}/{name}"

    def download(self, version: str, name: str, dest: Path) -> Path:
        self.downloads.append(dest)
        dest.write_bytes(BINARY)
        return dest

    def fetch_manifest(self, version: str) -> str:
        self.manifest_versions.append(version)
        if self.manifest_error is not None:
            raise self.manifest_error
        return self.manifest


class StubToolchain:
    def is_available(self) -> bool:
        return True

    def version(self) -> str | None:
        return "rustc 1.80.0"

    def install(self) -> bool:
        return True

    def update(self) -> bool:
        return False


class StubBuilder:
    def __init__(self) -> None:
        self.branches: list[str] = []

    def clone(self, url: str, dest: Path) -> bool:
        dest.mkdir(parents=True)
        return True

    def checkout(self, repo_dir: Path, branch: str) -> bool:
        self.branches.append(branch)
        return True

    def build(self, repo_dir: Path, binary: str) -> Path:
        out = repo_dir / "target" / "release" / binary
        out.parent.mkdir(parents=True)
        out.write_bytes(BINARY)
        return out


def _pipeline(
    tmp_path: Path,
    arch: Arch = Arch.X86_64,
    host: StubHost | None = None,
    metadata: StubMetadata | None = None,
    builder: StubBuilder | None = None,
    confirm=lambda _p, default: default,
) -> InstallPipeline:
    cfg = InstallerConfig()
    cfg.install.install_dir = str(tmp_path / "bin")
    cfg.install.force = True
    return InstallPipeline(
        cfg,
        confirm=confirm,
        metadata=metadata or StubMetadata(),
        host=host or StubHost(),
        toolchain=StubToolchain(),
        builder=builder or StubBuilder(),
        detector=lambda: SystemProfile(OsName.LINUX, arch),
    )


def test_download_path_verifies_and_installs(tmp_path) -> None:
    host = StubHost()
    metadata = StubMetadata()
    outcome = _pipeline(tmp_path, host=host, metadata=metadata).run("latest")

    assert outcome.version.tag == "v9.9.9"
    assert metadata.calls == 1
    assert host.manifest_versions == ["v9.9.9"]
    assert outcome.origin is Origin.DOWNLOADED
    assert outcome.verdict is not None and outcome.verdict.status is VerdictStatus.VERIFIED
    assert outcome.record.path == tmp_path / "bin" / "nym-client"
    assert outcome.record.reported_version == "nym-client 9.9.9"
    # Temporary workspace is gone after the run.
    assert not host.downloads[0].parent.exists()


def test_mismatch_aborts_and_cleans_up(tmp_path) -> None:
    destination = tmp_path / "bin"
    destination.mkdir()
    (destination / "nym-client").write_bytes(b"previous")
    host = StubHost(manifest=json.dumps({"assets": {"nym-client": {"sha256": "0" * 64}}}))

    with pytest.raises(IntegrityFailure):
        _pipeline(tmp_path, host=host).run("v9.9.9")

    assert (destination / "nym-client").read_bytes() == b"previous"
    assert not host.downloads[0].parent.exists()


def test_unreachable_manifest_still_installs(tmp_path) -> None:
    host = StubHost(manifest_error=urllib.error.URLError("connection reset"))
    outcome = _pipeline(tmp_path, host=host).run("v9.9.9")

    assert outcome.verdict is not None
    assert outcome.verdict.status is VerdictStatus.UNVERIFIABLE
    assert outcome.record.path.read_bytes() == BINARY


def test_literal_version_never_queries_metadata(tmp_path) -> None:
    metadata = StubMetadata()
    outcome = _pipeline(tmp_path, metadata=metadata).run("v1.0.0")
    assert metadata.calls == 0
    assert outcome.version.tag == "v1.0.0"


def test_build_path_skips_verification(tmp_path) -> None:
    host = StubHost()
    builder = StubBuilder()
    outcome = _pipeline(tmp_path, arch=Arch.AARCH64, host=host, builder=builder).run("v9.9.9")

    assert outcome.origin is Origin.BUILT
    assert outcome.verdict is None
    assert host.downloads == []
    assert host.manifest_versions == []
    assert builder.branches == ["master"]


def test_repeat_install_is_idempotent(tmp_path) -> None:
    first = _pipeline(tmp_path).run("v9.9.9")
    first_digest = hashlib.sha256(first.record.path.read_bytes()).hexdigest()
    second = _pipeline(tmp_path).run("v9.9.9")

    assert hashlib.sha256(second.record.path.read_bytes()).hexdigest() == first_digest


def test_existing_install_declined(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(pipeline_mod.shutil, "which", lambda _name: "/usr/local/bin/nym-client")
    host = StubHost()
    pipe = _pipeline(tmp_path, host=host)
    pipe.config.install.force = False

    with pytest.raises(InstallCancelled):
        pipe.run("v9.9.9")
    assert host.downloads == []


def test_path_contains(tmp_path) -> None:
    bin_dir = tmp_path / "bin"
    assert path_contains(bin_dir, os.pathsep.join(["/usr/bin", str(bin_dir)]))
    assert not path_contains(bin_dir, "/usr/bin")
