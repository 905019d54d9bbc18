"""TLS context and request helpers shared by every network collaborator."""

from __future__ import annotations

import os
import ssl
import urllib.request

import certifi


USER_AGENT = "NymClientInstaller/0.1 (+https://github.com/nymtech/nym)"


def build_ssl_context(ca_bundle: str | None = None, allow_insecure: bool = False) -> ssl.SSLContext:
    """Create TLS context for installer downloads with explicit CA handling."""
    if allow_insecure or os.environ.get("NYMCLIENT_ALLOW_INSECURE_TLS", "").strip() == "1":
        return ssl._create_unverified_context()

    ca_bundle = ca_bundle or os.environ.get("NYMCLIENT_CA_BUNDLE", "").strip()
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)

    return ssl.create_default_context(cafile=certifi.where())


def urlopen(
    url: str,
    timeout: int,
    accept: str = "*/*",
    context: ssl.SSLContext | None = None,
):
    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": USER_AGENT,
            "Accept": accept,
        },
    )
    return urllib.request.urlopen(request, timeout=timeout, context=context or build_ssl_context())
