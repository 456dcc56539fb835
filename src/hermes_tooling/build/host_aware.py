"""Host-aware platform handling: host detection, cross-build classification, triples.

A cell is a cross build when its binaries cannot execute on the build host:
UWP binaries never can; otherwise the target platform must be in the host's
native set. x86 runs natively on x64, so that pair is not cross. arm64ec is
cross on every host.
"""

from __future__ import annotations

import platform as _platform

from hermes_tooling.errors import UnsupportedHostError

PLATFORMS = ("x64", "x86", "arm64", "arm64ec")
CONFIGURATIONS = ("debug", "release")
HOST_ARCHS = ("x64", "arm64")

# Platforms whose binaries execute directly on each host.
NATIVE_PLATFORMS: dict[str, frozenset[str]] = {
    "x64": frozenset({"x64", "x86"}),
    "arm64": frozenset({"arm64"}),
}

# Clang -target triples used when cross-compiling with Clang.
TARGET_TRIPLES: dict[str, str] = {
    "x86": "i686-pc-windows-msvc",
    "x64": "x64-pc-windows-msvc",
    "arm64": "aarch64-pc-windows-msvc",
    "arm64ec": "arm64ec-pc-windows-msvc",
}

_MACHINE_TO_HOST = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

# (host, platform) -> vcvarsall.bat architecture argument.
_VCVARS_ARCH: dict[tuple[str, str], str] = {
    ("x64", "x64"): "amd64",
    ("x64", "x86"): "amd64_x86",
    ("x64", "arm64"): "amd64_arm64",
    ("x64", "arm64ec"): "amd64_arm64",
    ("arm64", "arm64"): "arm64",
    ("arm64", "arm64ec"): "arm64",
    ("arm64", "x86"): "arm64_x86",
    ("arm64", "x64"): "arm64_amd64",
}

_HOST_DEFAULT_VCVARS = {"x64": "amd64", "arm64": "arm64"}


def detect_host_architecture(machine: str | None = None) -> str:
    """Map platform.machine() to x64 or arm64. Raises UnsupportedHostError otherwise."""
    raw = machine if machine is not None else _platform.machine()
    host = _MACHINE_TO_HOST.get(raw.lower())
    if host is None:
        msg = f"Unsupported host CPU architecture: {raw}"
        raise UnsupportedHostError(msg)
    return host


def is_cross_build(host_arch: str, platform: str, is_uwp: bool) -> bool:
    """True when the cell's binaries cannot run on the host (skip tests, need host hermesc)."""
    if is_uwp:
        return True
    return platform not in NATIVE_PLATFORMS.get(host_arch, frozenset({host_arch}))


def vcvars_arch_token(host_arch: str, platform: str) -> str:
    """vcvarsall.bat architecture argument for building platform on host_arch."""
    return _VCVARS_ARCH.get((host_arch, platform), _HOST_DEFAULT_VCVARS.get(host_arch, "amd64"))
