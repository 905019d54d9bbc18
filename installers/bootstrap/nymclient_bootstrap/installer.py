"""Place a verified artifact at its destination and smoke-check it."""

from __future__ import annotations

import os
import shutil
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from nymclient_core.logging_setup import get_logger

from .acquire import Artifact, make_executable
from .errors import CopyFailed, IntegrityFailure, SmokeCheckFailed
from .integrity import VerificationVerdict


log = get_logger("install")


@dataclass(frozen=True)
class InstallationRecord:
    path: Path
    reported_version: str


@contextmanager
def destination_lock(directory: Path) -> Iterator[None]:
    """Hold an exclusive advisory lock on ``directory`` (POSIX only)."""
    if os.name != "posix":
        yield
        return

    import fcntl

    fd = os.open(str(directory), os.O_RDONLY)
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


class Installer:
    def __init__(
        self,
        binary_name: str = "nym-client",
        smoke_args: Sequence[str] = ("--version",),
        timeout_s: int = 60,
    ) -> None:
        self.binary_name = binary_name
        self.smoke_args = tuple(smoke_args)
        self.timeout_s = timeout_s

    def install(
        self,
        artifact: Artifact,
        destination: Path,
        verdict: VerificationVerdict | None = None,
    ) -> InstallationRecord:
        if verdict is not None and verdict.is_mismatched:
            raise IntegrityFailure(
                f"refusing to install {artifact.path.name}: expected sha256 {verdict.expected}, got {verdict.actual}"
            )

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CopyFailed(f"could not create {destination}: {exc}") from exc

        target = destination / self.binary_name
        with destination_lock(destination):
            self._copy(artifact.path, target)
            log.info(f"installed {self.binary_name} to {target}")
            reported = self.smoke_check(target)

        log.info(f"installation successful: {reported}")
        return InstallationRecord(path=target, reported_version=reported)

    def _copy(self, source: Path, target: Path) -> None:
        partial = target.with_name(f".{target.name}.partial")
        try:
            shutil.copyfile(source, partial)
            make_executable(partial)
            os.replace(partial, target)
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise CopyFailed(f"could not copy {source} to {target}: {exc}") from exc

    def smoke_check(self, target: Path) -> str:
        cmd = [str(target), *self.smoke_args]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout_s, check=False)
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SmokeCheckFailed(f"{target} could not be executed: {exc}") from exc
        if proc.returncode != 0:
            raise SmokeCheckFailed(f"{' '.join(cmd)} exited with code {proc.returncode}")
        lines = proc.stdout.strip().splitlines()
        return lines[0].strip() if lines else ""
