"""Copy build outputs into pkg-staging/{lib,tools}/native/... for the NuGet pack step.

Layout (relative to staging_root):
  lib/native/{win32,uwp}/{configuration}/{platform}/   hermes.dll, hermes.lib, hermes.pdb
  tools/native/{configuration}/{platform}/             hermes.exe, hermesc.exe (native cells only)

Both app-model lib directories are always created so the nuspec sees a uniform tree.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from hermes_tooling.build.params import BuildParams, RunParams
from hermes_tooling.errors import StagingError
from hermes_tooling.helpers import APP_MODELS, app_model_name, ensure_dir

log = logging.getLogger(__name__)

DLL_FILES = ("hermes.dll", "hermes.lib", "hermes.pdb")
TOOL_FILES = ("hermes.exe", "hermesc.exe")

FAKE_BINARY = b"MZ" + b"\0" * 62 + b"hermes fake-build placeholder\n"


@dataclass(frozen=True, slots=True)
class StagingPaths:
    dll_path: Path
    tools_path: Path


def dll_staging_path(staging_root: Path, app_model: str, configuration: str, platform: str) -> Path:
    return staging_root / "lib" / "native" / app_model / configuration / platform


def tools_staging_path(staging_root: Path, configuration: str, platform: str) -> Path:
    return staging_root / "tools" / "native" / configuration / platform


def ensure_staging_paths(params: BuildParams, run_params: RunParams) -> StagingPaths:
    """Create lib dirs for both app models plus the tools dir; return the ones for this cell."""
    root = run_params.staging_root
    for model in APP_MODELS:
        ensure_dir(dll_staging_path(root, model, params.configuration, params.platform))
    tools = ensure_dir(tools_staging_path(root, params.configuration, params.platform))
    model = app_model_name(params.is_uwp)
    dll = dll_staging_path(root, model, params.configuration, params.platform)
    return StagingPaths(dll_path=dll, tools_path=tools)


def copy_file(file_name: str, source_dir: Path, target_dir: Path, optional: bool = False) -> bool:
    """Copy source_dir/file_name over target_dir/file_name. Returns False when an optional source is missing."""
    ensure_dir(target_dir)
    source = source_dir / file_name
    if not source.is_file():
        if optional:
            print(f"Skipping copy of {file_name} (file not found, optional copy)")
            log.info("Optional staging copy skipped: %s", source)
            return False
        msg = f"Build output not found: {source}"
        raise StagingError(msg)
    shutil.copy2(source, target_dir / file_name)
    return True


def stage_build_outputs(params: BuildParams, run_params: RunParams) -> StagingPaths:
    """Post-build step: copy DLLs (and host tools for native cells) into staging.

    With custom targets a subset of outputs is expected, so missing files are skipped
    instead of failing the run.
    """
    paths = ensure_staging_paths(params, run_params)
    optional = params.has_custom_targets
    if optional:
        print("Optional file copying mode enabled")

    dll_source = params.build_path / "API" / "hermes_shared"
    for name in DLL_FILES:
        copy_file(name, dll_source, paths.dll_path, optional)

    if not params.is_cross:
        tools_source = params.build_path / "bin"
        for name in TOOL_FILES:
            copy_file(name, tools_source, paths.tools_path, optional)

    print(f"✅ Staged {params.cell.app_model}-{params.platform}-{params.configuration}")
    return paths


def _write_fake_binary(target: Path) -> None:
    kernel32 = Path(os.environ.get("SystemRoot", "")) / "system32" / "kernel32.dll"
    if os.environ.get("SystemRoot") and kernel32.is_file():
        shutil.copyfile(kernel32, target)
    else:
        target.write_bytes(FAKE_BINARY)


def stage_fake_outputs(params: BuildParams, run_params: RunParams) -> StagingPaths:
    """Write placeholder binaries at every staging path this cell would fill. No toolchain runs."""
    paths = ensure_staging_paths(params, run_params)
    for model in APP_MODELS:
        target_dir = dll_staging_path(
            run_params.staging_root, model, params.configuration, params.platform
        )
        for name in DLL_FILES:
            _write_fake_binary(target_dir / name)
    if not params.is_cross:
        for name in TOOL_FILES:
            _write_fake_binary(paths.tools_path / name)
    print(f"🧪 Fake outputs staged for {params.platform}-{params.configuration}")
    return paths
