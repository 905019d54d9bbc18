"""CLI entrypoints for nym-client install, platform detection, and verification."""

from __future__ import annotations

import argparse
import json
import signal
import sys
from dataclasses import asdict
from pathlib import Path

from nymclient_bootstrap import (
    Artifact,
    InstallCancelled,
    InstallerError,
    IntegrityFailure,
    IntegrityVerifier,
    InstallPipeline,
    Origin,
    VerdictStatus,
    VersionResolver,
    detect,
)
from nymclient_bootstrap.prompts import make_confirm
from nymclient_bootstrap.service import ReleaseArtifactHost
from nymclient_core import InstallerConfig, Verbosity, configure_logging, get_logger, load_config, save_config
from nymclient_core.http import build_ssl_context
from nymclient_core.releases import ReleaseService


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _raise_on_sigterm(signum, _frame) -> None:
    raise SystemExit(128 + signum)


def _apply_overrides(cfg: InstallerConfig, args: argparse.Namespace) -> InstallerConfig:
    version = getattr(args, "version_opt", None) or getattr(args, "version", None)
    if version:
        cfg.install.version = version
    if getattr(args, "install_dir", None):
        cfg.install.install_dir = args.install_dir
    if getattr(args, "force", False):
        cfg.install.force = True
    if getattr(args, "verbose", False):
        cfg.ui.verbosity = Verbosity.VERBOSE.value
    if getattr(args, "silent", False):
        cfg.ui.verbosity = Verbosity.QUIET.value
        cfg.ui.interactive = False
    return cfg


def _context(cfg: InstallerConfig):
    return build_ssl_context(cfg.network.ca_bundle, cfg.network.allow_insecure_tls)


def _resolver(cfg: InstallerConfig) -> VersionResolver:
    metadata = ReleaseService(timeout_s=cfg.network.timeout_s, context=_context(cfg))
    return VersionResolver(metadata, repo=cfg.source.repo, tag_prefix=cfg.source.tag_prefix)


def _host(cfg: InstallerConfig) -> ReleaseArtifactHost:
    return ReleaseArtifactHost(
        repo=cfg.source.repo,
        tag_prefix=cfg.source.tag_prefix,
        manifest_name=cfg.source.manifest_name,
        timeout_s=cfg.network.timeout_s,
        context=_context(cfg),
    )


def cmd_install(args: argparse.Namespace, cfg: InstallerConfig) -> int:
    if args.save_config:
        save_config(cfg, Path(args.config) if args.config else None)

    interactive = cfg.ui.interactive and sys.stdin.isatty()
    pipeline = InstallPipeline(cfg, confirm=make_confirm(interactive, assume_yes=args.yes))
    outcome = pipeline.run()

    if args.json:
        _print_json(
            {
                "target_os": outcome.profile.os_name.value,
                "target_arch": outcome.profile.arch.value,
                "version": outcome.version.tag,
                "origin": outcome.origin.value,
                "verdict": asdict(outcome.verdict) if outcome.verdict else None,
                "path": str(outcome.record.path),
                "reported_version": outcome.record.reported_version,
                "on_path": outcome.on_path,
            }
        )
    return 0


def cmd_detect(_args: argparse.Namespace, _cfg: InstallerConfig) -> int:
    profile = detect()
    _print_json(
        {
            "os": profile.os_name.value,
            "arch": profile.arch.value,
            "prebuilt_available": profile.has_prebuilt,
        }
    )
    return 0


def cmd_resolve(args: argparse.Namespace, cfg: InstallerConfig) -> int:
    version = _resolver(cfg).resolve(cfg.install.version)
    _print_json({"spec": cfg.install.version, "version": version.tag})
    return 0


def cmd_verify(args: argparse.Namespace, cfg: InstallerConfig) -> int:
    path = Path(args.file).expanduser().resolve()
    if not path.is_file():
        get_logger("verify").error(f"{path} does not exist")
        return 2
    version = _resolver(cfg).resolve(cfg.install.version)
    verifier = IntegrityVerifier(_host(cfg))
    artifact = Artifact(path=path, origin=Origin.DOWNLOADED)
    verdict = verifier.verify(artifact, version, asset_name=args.asset or cfg.source.binary_name)
    _print_json(asdict(verdict))
    return IntegrityFailure.exit_code if verdict.status is VerdictStatus.MISMATCHED else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nymclient-install", description="Install the nym-client binary")
    parser.add_argument("--config", default=None, help="Path to installer settings JSON")
    parser.add_argument("--log-file", default=None, help="Also write JSON-lines logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    install_cmd = sub.add_parser("install", help="Download or build nym-client and install it")
    install_cmd.add_argument("version", nargs="?", default=None, help="Release version, e.g. v2025.4-dorina-patched, or 'latest'")
    install_cmd.add_argument("--version", dest="version_opt", default=None, help="Release version or 'latest'")
    install_cmd.add_argument("--install-dir", default=None, help="Destination directory (default ~/.local/bin)")
    install_cmd.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    install_cmd.add_argument("-s", "--silent", action="store_true", help="Errors only, never prompt")
    install_cmd.add_argument("-y", "--yes", action="store_true", help="Answer yes to every prompt")
    install_cmd.add_argument("--force", action="store_true", help="Reinstall without asking when already on PATH")
    install_cmd.add_argument("--save-config", action="store_true", help="Persist the effective settings")
    install_cmd.add_argument("--json", action="store_true", help="Print a JSON summary on success")
    install_cmd.set_defaults(func=cmd_install)

    detect_cmd = sub.add_parser("detect", help="Print the detected OS and architecture")
    detect_cmd.set_defaults(func=cmd_detect)

    resolve_cmd = sub.add_parser("resolve", help="Resolve a version token such as 'latest'")
    resolve_cmd.add_argument("version", nargs="?", default=None)
    resolve_cmd.set_defaults(func=cmd_resolve)

    verify_cmd = sub.add_parser("verify", help="Check a local file against a release hash manifest")
    verify_cmd.add_argument("file")
    verify_cmd.add_argument("--version", dest="version_opt", required=True, help="Release version or 'latest'")
    verify_cmd.add_argument("--asset", default=None, help="Manifest entry to compare against (default: nym-client)")
    verify_cmd.set_defaults(func=cmd_verify)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = _apply_overrides(load_config(Path(args.config) if args.config else None), args)
    configure_logging(cfg.verbosity, log_file=Path(args.log_file) if args.log_file else None)
    signal.signal(signal.SIGTERM, _raise_on_sigterm)

    log = get_logger("pipeline")
    try:
        return int(args.func(args, cfg))
    except InstallCancelled as exc:
        log.info(str(exc))
        return 0
    except IntegrityFailure as exc:
        get_logger(exc.stage).critical(str(exc), extra={"event": "integrity_failure"})
        return exc.exit_code
    except InstallerError as exc:
        get_logger(exc.stage).error(f"{type(exc).__name__}: {exc}")
        return exc.exit_code
    except KeyboardInterrupt:
        log.error("interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
