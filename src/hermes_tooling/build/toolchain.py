"""Run CMake/ctest inside an activated MSVC environment (vcvarsall.bat).

Every command runs as one shell line: vcvarsall first, then the command, so the
command inherits the compiler environment. The process working directory is
switched to the cell's build directory for the duration and always restored.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from hermes_tooling.build.host_aware import vcvars_arch_token
from hermes_tooling.build.params import BuildParams
from hermes_tooling.errors import CommandFailedError, ToolchainNotFoundError
from hermes_tooling.helpers import ensure_dir

log = logging.getLogger(__name__)

VS_MAJOR_VERSION = "17"

# Extra compiler flags per target platform.
PLATFORM_ENV: dict[str, dict[str, str]] = {
    "arm64ec": {"CFLAGS": "-arm64EC", "CXXFLAGS": "-arm64EC"},
}


def find_vcvarsall(env: Mapping[str, str] | None = None) -> Path:
    """Locate vcvarsall.bat of the first VS 17 install via vswhere. Raises ToolchainNotFoundError."""
    env = os.environ if env is None else env
    program_files = env.get("ProgramFiles(x86)") or env.get("ProgramFiles")
    if not program_files:
        msg = "Could not find vswhere.exe: ProgramFiles is not set"
        raise ToolchainNotFoundError(msg)
    vswhere = Path(program_files) / "Microsoft Visual Studio" / "Installer" / "vswhere.exe"
    if not vswhere.exists():
        msg = f"Could not find vswhere.exe at {vswhere}"
        raise ToolchainNotFoundError(msg)

    r = subprocess.run(
        [str(vswhere), "-format", "json", "-version", VS_MAJOR_VERSION],
        capture_output=True,
        text=True,
    )
    if r.returncode != 0:
        raise CommandFailedError(r.returncode, f"{vswhere} -format json", r.stderr or "")
    try:
        installs = json.loads(r.stdout or "[]")
    except json.JSONDecodeError as e:
        msg = f"vswhere returned invalid JSON: {e}"
        raise ToolchainNotFoundError(msg) from e
    if not installs:
        msg = f"No Visual Studio {VS_MAJOR_VERSION} installation found by vswhere"
        raise ToolchainNotFoundError(msg)
    if len(installs) > 1:
        log.warning("More than one VS install detected, picking the first one")

    vcvarsall = (
        Path(installs[0]["installationPath"]) / "VC" / "Auxiliary" / "Build" / "vcvarsall.bat"
    )
    if not vcvarsall.exists():
        msg = f"Could not find vcvarsall.bat at expected Visual Studio installation path: {vcvarsall}"
        raise ToolchainNotFoundError(msg)
    return vcvarsall


@contextmanager
def scoped_working_directory(path: Path) -> Iterator[Path]:
    """chdir into path (created if missing) and restore the previous cwd on every exit."""
    ensure_dir(path)
    original = Path.cwd()
    os.chdir(path)
    log.debug("Changed CWD to: %s", path)
    try:
        yield path
    finally:
        os.chdir(original)
        log.debug("Changed CWD back to: %s", original)


def command_environment(
    platform: str,
    extra_env: Mapping[str, str] | None = None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Copy of the base environment with platform flags and extra_env applied. Base is not modified."""
    env = dict(os.environ if base is None else base)
    env.update(PLATFORM_ENV.get(platform, {}))
    if extra_env:
        env.update(extra_env)
    return env


def run_checked(
    command: list[str] | str,
    cwd: Path | None = None,
    capture: bool = False,
) -> str:
    """Run a non-toolchain command (git, nuget). Raises CommandFailedError on non-zero exit."""
    shown = command if isinstance(command, str) else subprocess.list2cmdline(command)
    print(f"Run command: {shown}")
    r = subprocess.run(
        command,
        cwd=str(cwd) if cwd else None,
        capture_output=capture,
        text=True,
        shell=isinstance(command, str),
    )
    if r.returncode != 0:
        raise CommandFailedError(r.returncode, shown, (r.stderr or "") if capture else "")
    return (r.stdout or "").strip() if capture else ""


class Toolchain:
    """vcvarsall.bat activation plus command execution for one orchestration run."""

    def __init__(self, vcvarsall: Path, windows_sdk_version: str = "") -> None:
        self.vcvarsall = vcvarsall
        self.windows_sdk_version = windows_sdk_version

    @classmethod
    def discover(cls, windows_sdk_version: str = "") -> Toolchain:
        return cls(find_vcvarsall(), windows_sdk_version)

    def activation_args(self, params: BuildParams) -> str:
        """Arguments after vcvarsall.bat: arch token, app model, SDK version, spectre libs."""
        parts = [vcvars_arch_token(params.host_arch, params.platform)]
        if params.is_uwp:
            parts.append("uwp")
        if self.windows_sdk_version:
            parts.append(self.windows_sdk_version)
        parts.append("-vcvars_spectre_libs=spectre")
        return " ".join(parts)

    def shell_command(self, command: str, params: BuildParams) -> str:
        return f'"{self.vcvarsall}" {self.activation_args(params)} && {command} 2>&1'

    def invoke(
        self,
        command: str,
        params: BuildParams,
        extra_env: Mapping[str, str] | None = None,
    ) -> tuple[int, str]:
        """Run command in params.build_path with the compiler environment active.

        Output lines are echoed as they arrive and also collected.
        Returns (0, combined output). Non-zero exit raises CommandFailedError; no retry.
        """
        env = command_environment(params.platform, extra_env)
        full = self.shell_command(command, params)
        lines: list[str] = []
        with scoped_working_directory(params.build_path):
            print(f"Run command: {full}", flush=True)
            with subprocess.Popen(
                full,
                shell=True,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            ) as proc:
                for line in proc.stdout:
                    sys.stdout.write(line)
                    sys.stdout.flush()
                    lines.append(line)
                returncode = proc.wait()
        output = "".join(lines)
        if returncode != 0:
            print(f"\n❌ Build command failed with exit code: {returncode}", file=sys.stderr)
            raise CommandFailedError(returncode, command, output)
        return returncode, output
