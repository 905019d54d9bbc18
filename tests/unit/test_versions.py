import sys
import unittest
import urllib.error
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))

from nymclient_core.releases import ReleaseService
from nymclient_bootstrap.errors import EmptyReleaseTag, ReleaseUnreachable
from nymclient_bootstrap.versions import ResolvedVersion, VersionResolver


class _ExplodingMetadata:
    def latest_tag(self, repo):
        raise AssertionError("release metadata must not be queried")


class _StubMetadata:
    def __init__(self, tag):
        self.tag = tag
        self.repos = []

    def latest_tag(self, repo):
        self.repos.append(repo)
        return self.tag


class _UnreachableMetadata:
    def latest_tag(self, repo):
        raise urllib.error.URLError("name resolution failed")


class VersionResolverTests(unittest.TestCase):
    def test_literal_tag_skips_network(self):
        resolver = VersionResolver(_ExplodingMetadata(), repo="nymtech/nym")
        self.assertEqual(resolver.resolve("v1.2.3"), ResolvedVersion("v1.2.3"))

    def test_latest_strips_release_prefix(self):
        metadata = _StubMetadata("nym-binaries-v9.9.9")
        resolver = VersionResolver(metadata, repo="nymtech/nym")
        version = resolver.resolve("latest")
        self.assertEqual(version.tag, "v9.9.9")
        self.assertEqual(metadata.repos, ["nymtech/nym"])

    def test_latest_without_prefix_is_kept(self):
        resolver = VersionResolver(_StubMetadata("v2.0.0"), repo="nymtech/nym")
        self.assertEqual(resolver.resolve("latest").tag, "v2.0.0")

    def test_empty_tag_is_fatal(self):
        for tag in (None, "", "nym-binaries-"):
            with self.subTest(tag=tag):
                resolver = VersionResolver(_StubMetadata(tag), repo="nymtech/nym")
                with self.assertRaises(EmptyReleaseTag):
                    resolver.resolve("latest")

    def test_unreachable_metadata_is_fatal(self):
        resolver = VersionResolver(_UnreachableMetadata(), repo="nymtech/nym")
        with self.assertRaises(ReleaseUnreachable):
            resolver.resolve("latest")


def test_truncated_release_metadata_is_unreachable(serve_bytes):
    service = ReleaseService(api_root=serve_bytes(b"{\"tag_name\": \"nym-bin", advertised=4096))
    resolver = VersionResolver(service, repo="nymtech/nym")

    with pytest.raises(ReleaseUnreachable):
        resolver.resolve("latest")


if __name__ == "__main__":
    unittest.main()
