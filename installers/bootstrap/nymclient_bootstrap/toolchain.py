"""Source-control and Rust build toolchain collaborators."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from nymclient_core.http import build_ssl_context, urlopen
from nymclient_core.logging_setup import get_logger


RUSTUP_URL = "https://sh.rustup.rs"

log = get_logger("acquire")


def _cargo_env() -> dict[str, str]:
    env = dict(os.environ)
    cargo_bin = str(Path.home() / ".cargo" / "bin")
    if cargo_bin not in env.get("PATH", "").split(os.pathsep):
        env["PATH"] = os.pathsep.join(p for p in (cargo_bin, env.get("PATH", "")) if p)
    return env


def _run(cmd: Sequence[str], cwd: Path | None = None, stdin: bytes | None = None) -> int:
    log.debug(f"running {' '.join(cmd)}")
    try:
        proc = subprocess.run(list(cmd), cwd=cwd, input=stdin, env=_cargo_env(), check=False)
    except OSError as exc:
        log.warning(f"could not run {cmd[0]}: {exc}")
        return 127
    return proc.returncode


class RustToolchain:
    """rustc/rustup/cargo discovered on PATH or under ``~/.cargo/bin``."""

    def _which(self, name: str) -> str | None:
        return shutil.which(name, path=_cargo_env().get("PATH"))

    def is_available(self) -> bool:
        return self._which("rustc") is not None

    def version(self) -> str | None:
        rustc = self._which("rustc")
        if rustc is None:
            return None
        try:
            out = subprocess.run([rustc, "--version"], capture_output=True, text=True, check=False, env=_cargo_env())
        except OSError:
            return None
        return out.stdout.strip() or None

    def install(self) -> bool:
        """Run the rustup bootstrap script non-interactively."""
        try:
            with urlopen(RUSTUP_URL, timeout=120, context=build_ssl_context()) as resp:
                script = resp.read()
        except OSError as exc:
            log.error(f"could not fetch rustup installer: {exc}")
            return False
        code = _run(["sh", "-s", "--", "-y"], stdin=script)
        return code == 0 and self.is_available()

    def update(self) -> bool:
        return _run(["rustup", "update"]) == 0


class GitCargoBuilder:
    """Clones a repository and drives ``cargo build --release --bin <name>``."""

    def clone(self, url: str, dest: Path) -> bool:
        return _run(["git", "clone", url, str(dest)]) == 0

    def checkout(self, repo_dir: Path, branch: str) -> bool:
        return _run(["git", "checkout", branch], cwd=repo_dir) == 0

    def build(self, repo_dir: Path, binary: str) -> Path:
        code = _run(["cargo", "build", "--release", "--bin", binary], cwd=repo_dir)
        if code != 0:
            log.warning(f"cargo exited with code {code}")
        return repo_dir / "target" / "release" / binary
