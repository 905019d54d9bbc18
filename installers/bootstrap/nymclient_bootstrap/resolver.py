"""Host platform detection normalized to installer OS/architecture names."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from enum import Enum


class OsName(str, Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class Arch(str, Enum):
    X86_64 = "x86_64"
    X86 = "x86"
    AARCH64 = "aarch64"
    ARM = "arm"
    UNKNOWN = "unknown"


PREBUILT_ARCHES = frozenset({Arch.X86_64, Arch.X86})


@dataclass(frozen=True)
class SystemProfile:
    os_name: OsName
    arch: Arch

    @property
    def has_prebuilt(self) -> bool:
        return self.arch in PREBUILT_ARCHES


def _normalize_os(system: str) -> OsName:
    s = system.strip().lower()
    if s.startswith("linux"):
        return OsName.LINUX
    if s.startswith("darwin"):
        return OsName.MACOS
    if s.startswith(("cygwin", "mingw", "msys", "windows")):
        return OsName.WINDOWS
    return OsName.UNKNOWN


def _normalize_arch(machine: str) -> Arch:
    m = machine.strip().lower()
    if m in ("x86_64", "amd64"):
        return Arch.X86_64
    if m in ("i386", "i686"):
        return Arch.X86
    if m in ("arm64", "aarch64"):
        return Arch.AARCH64
    if m.startswith("armv7"):
        return Arch.ARM
    return Arch.UNKNOWN


def resolve_target(system: str, machine: str) -> SystemProfile:
    return SystemProfile(os_name=_normalize_os(system), arch=_normalize_arch(machine))


def detect() -> SystemProfile:
    """Profile the running host. Unmapped values come back as ``unknown``."""
    uname = platform.uname()
    return resolve_target(uname.system, uname.machine)
