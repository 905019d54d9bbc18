"""Release metadata lookups against the GitHub Releases API."""

from __future__ import annotations

import json
import ssl
from dataclasses import dataclass
from typing import Any

from .http import build_ssl_context, urlopen


@dataclass(frozen=True)
class ReleaseInfo:
    tag_name: str | None
    name: str | None
    html_url: str | None
    prerelease: bool = False


class ReleaseService:
    """Release-metadata collaborator.

    Transport failures (``urllib.error.URLError``, timeouts, other ``OSError``,
    and ``http.client.HTTPException`` for a truncated body) propagate to the
    caller. A response that decodes but carries no tag is returned as a
    ``ReleaseInfo`` with ``tag_name=None``.
    """

    def __init__(
        self,
        api_root: str = "https://api.github.com",
        timeout_s: int = 30,
        context: ssl.SSLContext | None = None,
    ) -> None:
        self.api_root = api_root.rstrip("/")
        self.timeout_s = timeout_s
        self._context = context

    def _get_json(self, url: str) -> Any:
        context = self._context or build_ssl_context()
        with urlopen(url, timeout=self.timeout_s, accept="application/vnd.github+json", context=context) as resp:
            return json.loads(resp.read().decode("utf-8"))

    def latest(self, repo: str) -> ReleaseInfo:
        try:
            payload = self._get_json(f"{self.api_root}/repos/{repo}/releases/latest")
        except ValueError:
            return ReleaseInfo(tag_name=None, name=None, html_url=None)
        if not isinstance(payload, dict):
            return ReleaseInfo(tag_name=None, name=None, html_url=None)

        tag = payload.get("tag_name")
        return ReleaseInfo(
            tag_name=tag if isinstance(tag, str) and tag.strip() else None,
            name=payload.get("name"),
            html_url=payload.get("html_url"),
            prerelease=bool(payload.get("prerelease", False)),
        )

    def latest_tag(self, repo: str) -> str | None:
        return self.latest(repo).tag_name
