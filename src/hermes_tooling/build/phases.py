"""Per-cell CMake phases: configure -> build -> test / jstest.

Implicit prerequisites: build configures an unconfigured tree first; test builds a
missing tree first. Cross cells bootstrap the host hermesc into tools/ before
configuring or building, by running the build phase for a synthetic host cell.
That synthetic cell is never a cross build, so the recursion is one level deep.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from hermes_tooling.build.host_aware import TARGET_TRIPLES
from hermes_tooling.build.params import (
    DEFAULT_FILE_VERSION,
    BuildOptions,
    BuildParams,
    RunParams,
    host_tool_params,
)
from hermes_tooling.build.toolchain import Toolchain
from hermes_tooling.errors import BuildToolingError, ToolchainNotFoundError
from hermes_tooling.staging.assemble import stage_build_outputs

log = logging.getLogger(__name__)

CMAKE_CACHE = "CMakeCache.txt"
APPCONTAINER_LINKER_FLAGS = "-Wl,/APPCONTAINER -lwindowsapp"


class PostBuildHook(Protocol):
    def on_build_completed(self, params: BuildParams) -> None:
        """Called after a successful cmake --build for the cell."""


class NoPostBuild:
    """Post-build strategy for the host tool bootstrap: nothing to stage."""

    def on_build_completed(self, params: BuildParams) -> None:
        return None


class StageForPackaging:
    """Post-build strategy that copies the cell's outputs into pkg-staging."""

    def __init__(self, run_params: RunParams) -> None:
        self.run_params = run_params

    def on_build_completed(self, params: BuildParams) -> None:
        stage_build_outputs(params, self.run_params)


@dataclass(frozen=True, slots=True)
class PhaseContext:
    toolchain: Toolchain | None
    run_params: RunParams
    options: BuildOptions

    @property
    def layout(self) -> dict[str, str]:
        return self.options.layout

    def invoke(
        self,
        command: str,
        params: BuildParams,
        extra_env: Mapping[str, str] | None = None,
    ) -> tuple[int, str]:
        if self.toolchain is None:
            msg = "No compiler toolchain available for this run"
            raise ToolchainNotFoundError(msg)
        return self.toolchain.invoke(command, params, extra_env)


def cmake_preset(use_msvc: bool, configuration: str, prefix: str = "ninja") -> str:
    """<prefix>-{msvc|clang}-{release|debug}, e.g. ninja-clang-release."""
    compiler = "msvc" if use_msvc else "clang"
    config_type = "release" if configuration == "release" else "debug"
    return f"{prefix}-{compiler}-{config_type}"


def is_configured(build_path: Path) -> bool:
    return (build_path / CMAKE_CACHE).is_file()


def host_tool_path(tools_path: Path, layout: Mapping[str, str]) -> Path:
    return tools_path / "bin" / layout["host_tool_exe"]


def generator_args(params: BuildParams, ctx: PhaseContext) -> list[str]:
    """CMake generate-step arguments for this cell (without the source directory)."""
    options = ctx.options
    preset = cmake_preset(params.use_msvc, params.configuration, ctx.layout["preset_prefix"])
    print(f"Using CMake preset: {preset}")

    args = [f"--preset={preset}", f'-B"{params.build_path}"']

    if options.file_version and options.file_version != DEFAULT_FILE_VERSION:
        args.append(f"-DHERMES_FILE_VERSION={options.file_version}")

    if params.platform != params.host_arch and not params.use_msvc:
        triple = TARGET_TRIPLES.get(params.platform)
        if triple:
            args.append(f'-DCMAKE_C_FLAGS="-target {triple}"')
            args.append(f'-DCMAKE_CXX_FLAGS="-target {triple}"')

    args.append(f"-DHERMES_WINDOWS_TARGET_PLATFORM={params.platform}")

    if params.is_uwp:
        args.append("-DCMAKE_SYSTEM_NAME=WindowsStore")
        args.append(f'-DCMAKE_SYSTEM_VERSION="{options.windows_sdk_version}"')
        if not params.use_msvc:
            args.append(f'-DCMAKE_EXE_LINKER_FLAGS="{APPCONTAINER_LINKER_FLAGS}"')
            args.append(f'-DCMAKE_SHARED_LINKER_FLAGS="{APPCONTAINER_LINKER_FLAGS}"')

    if params.is_cross:
        import_file = params.tools_path / ctx.layout["import_host_compilers"]
        args.append(f'-DIMPORT_HOST_COMPILERS="{import_file}"')

    force_native = "OFF" if params.is_cross else "ON"
    args.append(f"-DHERMES_WINDOWS_FORCE_NATIVE_BUILD={force_native}")
    return args


def ensure_host_tool(params: BuildParams, ctx: PhaseContext) -> None:
    """Build the host hermesc into tools/ once, if this cell is a cross build and it is missing."""
    if not params.is_cross:
        return
    tool = host_tool_path(params.tools_path, ctx.layout)
    if tool.exists():
        log.debug("Host tool present: %s", tool)
        return

    host_params = host_tool_params(params, ctx.options)
    if host_params.is_cross:
        msg = f"Host tool cell {host_params.platform} classified as cross build"
        raise BuildToolingError(msg)
    print(f"🔨 Bootstrapping host {ctx.layout['host_tool_target']} for {params.host_arch}...")
    run_build(host_params, ctx, NoPostBuild())
    if not tool.exists():
        msg = f"Host tool bootstrap did not produce {tool}"
        raise BuildToolingError(msg)


def run_configure(params: BuildParams, ctx: PhaseContext) -> None:
    ensure_host_tool(params, ctx)
    args = generator_args(params, ctx)
    ctx.invoke(f'cmake {" ".join(args)} "{ctx.run_params.source_root}"', params)


def run_build(params: BuildParams, ctx: PhaseContext, hook: PostBuildHook) -> None:
    """cmake --build for the cell's targets (all when empty), then the post-build hook."""
    if not is_configured(params.build_path):
        run_configure(params, ctx)

    ensure_host_tool(params, ctx)

    command = "cmake --build ."
    if params.targets:
        command += f" --target {' '.join(params.targets)}"
    ctx.invoke(command, params)

    hook.on_build_completed(params)


def run_test(params: BuildParams, ctx: PhaseContext, hook: PostBuildHook) -> None:
    if params.is_cross:
        print("Skip testing for cross-platform builds")
        return
    if not params.build_path.exists():
        run_build(params, ctx, hook)
    ctx.invoke("ctest --output-on-failure", params)


def _prepend_path(env_path: str, dirs: list[Path]) -> str:
    entries = env_path.split(os.pathsep) if env_path else []
    new = [str(d) for d in dirs if str(d) not in entries]
    return os.pathsep.join(new + entries)


def jstest_path_dirs(source_root: Path, layout: Mapping[str, str]) -> list[Path]:
    """Directories the lit-based JS tests need on PATH: Git Bash, Python, the python3 alias.

    Missing tools are warnings; check-hermes has its own fallbacks.
    """
    dirs: list[Path] = []

    git = shutil.which("git")
    if not git:
        log.warning("Git (git.exe) not found in PATH.")
    else:
        git_dir = Path(git).parent
        print(f"Found Git at: {git_dir}")
        bash_dir = git_dir.parent / "bin" if git_dir.name.lower() == "cmd" else git_dir
        if (bash_dir / "bash.exe").exists():
            dirs.append(bash_dir)
        else:
            log.warning("Git Bash (bash.exe) not found at: %s", bash_dir)

    python = shutil.which("python")
    if not python:
        log.warning("Python (python.exe) not found in PATH.")
    else:
        python_dir = Path(python).parent
        print(f"Found Python at: {python_dir}")
        dirs.extend([python_dir, python_dir / "Scripts"])

    alias_dir = source_root / layout["bash_alias_dir"]
    if (alias_dir / "python3").exists():
        dirs.insert(0, alias_dir)
    else:
        log.warning("python3 alias script not found at: %s", alias_dir)

    return dirs


def run_jstest(params: BuildParams, ctx: PhaseContext) -> None:
    """Run the check-hermes target with the JS test tools prepended to PATH."""
    print("Setting up environment paths...")
    dirs = jstest_path_dirs(ctx.run_params.source_root, ctx.layout)
    extra_env: dict[str, str] = {}
    if dirs:
        extra_env["PATH"] = _prepend_path(os.environ.get("PATH", ""), dirs)
    print("Environment setup complete.")
    ctx.invoke(f"cmake --build . --target {ctx.layout['js_test_target']}", params, extra_env)
