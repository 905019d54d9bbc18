"""Content-hash verification of downloaded artifacts against release manifests."""

from __future__ import annotations

import hashlib
import http.client
import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from nymclient_core.logging_setup import get_logger

from .acquire import Artifact
from .versions import ResolvedVersion


log = get_logger("verify")


class ManifestSource(Protocol):
    def fetch_manifest(self, version: str) -> str: ...


class VerdictStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIABLE = "unverifiable"
    MISMATCHED = "mismatched"


@dataclass(frozen=True)
class VerificationVerdict:
    status: VerdictStatus
    reason: str | None = None
    expected: str | None = None
    actual: str | None = None
    # Substring match over an unparsed manifest; may be a false positive.
    weak: bool = False

    @classmethod
    def verified(cls, digest: str, weak: bool = False) -> "VerificationVerdict":
        return cls(VerdictStatus.VERIFIED, expected=digest, actual=digest, weak=weak)

    @classmethod
    def unverifiable(cls, reason: str, actual: str | None = None) -> "VerificationVerdict":
        return cls(VerdictStatus.UNVERIFIABLE, reason=reason, actual=actual)

    @classmethod
    def mismatched(cls, expected: str, actual: str) -> "VerificationVerdict":
        return cls(VerdictStatus.MISMATCHED, reason="hash mismatch", expected=expected, actual=actual)

    @property
    def is_mismatched(self) -> bool:
        return self.status is VerdictStatus.MISMATCHED


@dataclass(frozen=True)
class HashManifest:
    entries: dict[str, str] = field(default_factory=dict)
    raw: str = ""
    structured: bool = True

    def expected_for(self, name: str) -> str | None:
        return self.entries.get(name)


def _entry_hash(entry: Any) -> str | None:
    if isinstance(entry, str):
        return entry.strip().lower() or None
    if isinstance(entry, dict):
        value = entry.get("sha256")
        if isinstance(value, str) and value.strip():
            return value.strip().lower()
    return None


def parse_manifest(text: str) -> HashManifest:
    """Parse ``hashes.json``; unparseable text yields an unstructured manifest."""
    try:
        data = json.loads(text)
    except ValueError:
        return HashManifest(raw=text, structured=False)
    if not isinstance(data, dict):
        return HashManifest(raw=text, structured=False)

    assets = data.get("assets", data)
    entries: dict[str, str] = {}
    if isinstance(assets, dict):
        for name, entry in assets.items():
            digest = _entry_hash(entry)
            if digest:
                entries[str(name)] = digest
    elif isinstance(assets, list):
        for entry in assets:
            if isinstance(entry, dict) and entry.get("name"):
                digest = _entry_hash(entry)
                if digest:
                    entries[str(entry["name"])] = digest
    else:
        return HashManifest(raw=text, structured=False)
    return HashManifest(entries=entries, raw=text, structured=True)


def digest_file(path: Path, algorithm: str = "sha256") -> str:
    """Hex digest of ``path``. Raises ``ValueError`` if the algorithm is unavailable."""
    h = hashlib.new(algorithm)
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


class IntegrityVerifier:
    def __init__(self, source: ManifestSource, algorithm: str = "sha256") -> None:
        self.source = source
        self.algorithm = algorithm

    def verify(
        self,
        artifact: Artifact,
        version: ResolvedVersion,
        asset_name: str | None = None,
    ) -> VerificationVerdict:
        try:
            manifest = parse_manifest(self.source.fetch_manifest(version.tag))
        except (OSError, http.client.HTTPException) as exc:
            log.warning(f"could not download hash manifest: {exc}", extra={"event": "manifest_unreachable"})
            return VerificationVerdict.unverifiable("manifest unreachable")

        try:
            actual = digest_file(artifact.path, self.algorithm)
        except ValueError:
            log.warning(f"no {self.algorithm} implementation available, skipping verification")
            return VerificationVerdict.unverifiable("no hashing tool")
        except OSError as exc:
            log.warning(f"could not read artifact for hashing: {exc}")
            return VerificationVerdict.unverifiable("artifact unreadable")

        log.debug(f"artifact {self.algorithm}: {actual}")
        return check_digest(manifest, asset_name or artifact.path.name, actual)


def check_digest(manifest: HashManifest, name: str, actual: str) -> VerificationVerdict:
    actual = actual.lower()
    if not manifest.structured:
        if actual in manifest.raw.lower():
            log.warning("hash found in unparsed manifest (basic substring check only)")
            return VerificationVerdict.verified(actual, weak=True)
        log.warning("hash not found in unparsed manifest; verification cannot be completed")
        return VerificationVerdict.unverifiable("manifest not parseable", actual=actual)

    expected = manifest.expected_for(name)
    if expected is None:
        log.warning(f"manifest has no entry for {name}")
        return VerificationVerdict.unverifiable(f"no manifest entry for {name}", actual=actual)
    if expected == actual:
        log.info("hash verification successful")
        return VerificationVerdict.verified(actual)

    log.critical(
        f"hash verification failed for {name}: expected {expected}, got {actual}. Binary may be compromised.",
        extra={"event": "integrity_mismatch"},
    )
    return VerificationVerdict.mismatched(expected, actual)
