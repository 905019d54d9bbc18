"""Persistent installer settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1
DEFAULT_VERSION = "v2025.4-dorina-patched"


class Verbosity(str, Enum):
    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


@dataclass
class SourceConfig:
    repo: str = "nymtech/nym"
    git_url: str = "https://github.com/nymtech/nym.git"
    branch: str = "master"
    binary_name: str = "nym-client"
    tag_prefix: str = "nym-binaries-"
    manifest_name: str = "hashes.json"


@dataclass
class InstallConfig:
    version: str = DEFAULT_VERSION
    install_dir: str = "~/.local/bin"
    force: bool = False


@dataclass
class UiConfig:
    interactive: bool = True
    verbosity: str = Verbosity.NORMAL.value


@dataclass
class NetworkConfig:
    timeout_s: int = 60
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False


@dataclass
class InstallerConfig:
    config_version: int = CONFIG_VERSION
    source: SourceConfig = field(default_factory=SourceConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)

    @property
    def verbosity(self) -> Verbosity:
        return Verbosity(self.ui.verbosity)

    def destination(self) -> Path:
        return Path(self.install.install_dir).expanduser()


def config_path() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "NymClient" / "config.json"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "NymClient" / "config.json"
    return Path.home() / ".config" / "nymclient" / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_ui(cfg: InstallerConfig) -> None:
    cfg.ui.interactive = bool(cfg.ui.interactive)
    if cfg.ui.verbosity not in {v.value for v in Verbosity}:
        cfg.ui.verbosity = Verbosity.NORMAL.value


def _normalize_network(cfg: InstallerConfig) -> None:
    cfg.network.timeout_s = max(5, min(600, int(cfg.network.timeout_s)))
    cfg.network.allow_insecure_tls = bool(cfg.network.allow_insecure_tls)


def _normalize_install(cfg: InstallerConfig) -> None:
    cfg.install.version = str(cfg.install.version).strip() or DEFAULT_VERSION
    cfg.install.force = bool(cfg.install.force)


def _apply_env(cfg: InstallerConfig) -> InstallerConfig:
    install_dir = os.environ.get("NYMCLIENT_INSTALL_DIR", "").strip()
    if install_dir:
        cfg.install.install_dir = install_dir
    return cfg


def load_config(path: Path | None = None) -> InstallerConfig:
    path = path or config_path()
    if not path.exists():
        return _apply_env(InstallerConfig())

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return _apply_env(InstallerConfig())
    if not isinstance(raw, dict):
        return _apply_env(InstallerConfig())

    cfg = InstallerConfig(
        config_version=int(raw.get("config_version", CONFIG_VERSION)),
        source=_merge(SourceConfig, raw.get("source", {}) or {}),
        install=_merge(InstallConfig, raw.get("install", {}) or {}),
        ui=_merge(UiConfig, raw.get("ui", {}) or {}),
        network=_merge(NetworkConfig, raw.get("network", {}) or {}),
    )

    _normalize_ui(cfg)
    _normalize_network(cfg)
    _normalize_install(cfg)
    return _apply_env(cfg)


def save_config(cfg: InstallerConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
