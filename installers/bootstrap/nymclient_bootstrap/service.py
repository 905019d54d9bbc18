"""Artifact host collaborator: release binaries and hash manifests by version."""

from __future__ import annotations

import shutil
import ssl
from pathlib import Path

from nymclient_core.http import build_ssl_context, urlopen


class ReleaseArtifactHost:
    """Serves ``<base>/<repo>/releases/download/<prefix><version>/<name>``."""

    def __init__(
        self,
        repo: str = "nymtech/nym",
        tag_prefix: str = "nym-binaries-",
        manifest_name: str = "hashes.json",
        timeout_s: int = 180,
        context: ssl.SSLContext | None = None,
        base_url: str = "https://github.com",
    ) -> None:
        self.repo = repo
        self.tag_prefix = tag_prefix
        self.manifest_name = manifest_name
        self.timeout_s = timeout_s
        self.base_url = base_url.rstrip("/")
        self._context = context

    def asset_url(self, version: str, name: str) -> str:
        return f"{self.base_url}/{self.repo}/releases/download/{self.tag_prefix}{version}/{name}"

    def manifest_url(self, version: str) -> str:
        return self.asset_url(version, self.manifest_name)

    def download(self, version: str, name: str, dest: Path) -> Path:
        return download_file(self.asset_url(version, name), dest, self.timeout_s, self._context)

    def fetch_manifest(self, version: str) -> str:
        context = self._context or build_ssl_context()
        with urlopen(self.manifest_url(version), timeout=self.timeout_s, accept="application/json", context=context) as response:
            return response.read().decode("utf-8", errors="replace")


class IncompleteDownload(OSError):
    """The server closed the transfer before sending the advertised length."""


def download_file(url: str, dest: Path, timeout: int = 180, context: ssl.SSLContext | None = None) -> Path:
    dest.parent.mkdir(parents=True, exist_ok=True)
    with urlopen(url, timeout=timeout, context=context or build_ssl_context()) as response:
        advertised = response.headers.get("Content-Length")
        with dest.open("wb") as fh:
            shutil.copyfileobj(response, fh, 1024 * 1024)
            written = fh.tell()
    if advertised is not None and advertised.strip().isdigit() and written < int(advertised):
        raise IncompleteDownload(f"received {written} of {int(advertised)} bytes from {url}")
    return dest
