"""Turn a user version token into the concrete release version."""

from __future__ import annotations

import http.client
from dataclasses import dataclass
from typing import Protocol

from .errors import EmptyReleaseTag, ReleaseUnreachable


LATEST = "latest"


class ReleaseMetadata(Protocol):
    def latest_tag(self, repo: str) -> str | None: ...


@dataclass(frozen=True)
class ResolvedVersion:
    tag: str

    def __str__(self) -> str:
        return self.tag


class VersionResolver:
    def __init__(self, metadata: ReleaseMetadata, repo: str, tag_prefix: str = "nym-binaries-") -> None:
        self.metadata = metadata
        self.repo = repo
        self.tag_prefix = tag_prefix

    def resolve(self, spec: str) -> ResolvedVersion:
        spec = spec.strip()
        if spec != LATEST:
            if not spec:
                raise EmptyReleaseTag("empty version specifier")
            return ResolvedVersion(spec)

        try:
            tag = self.metadata.latest_tag(self.repo)
        except (OSError, http.client.HTTPException) as exc:
            raise ReleaseUnreachable(f"could not query latest release of {self.repo}: {exc}") from exc

        tag = (tag or "").strip()
        if tag.startswith(self.tag_prefix):
            tag = tag[len(self.tag_prefix):]
        if not tag:
            raise EmptyReleaseTag(f"latest release of {self.repo} has no usable tag")
        return ResolvedVersion(tag)
