"""Assemble headers, license and MSBuild files into pkg-staging, then run nuget pack.

Runs once after every matrix cell has been staged. Always re-copies from the
source tree; two packages are produced: the regular one (no .pdb files) and the
.Fat one (with symbols).
"""

from __future__ import annotations

import shutil
from pathlib import Path

from hermes_tooling.build.params import RunParams
from hermes_tooling.build.toolchain import run_checked
from hermes_tooling.helpers import ensure_dir
from hermes_tooling.staging.assemble import copy_file

NODE_API_HEADERS = (
    "js_native_api.h",
    "js_native_api_types.h",
    "node_api.h",
    "node_api_types.h",
)
HERMES_API_HEADERS = ("js_runtime_api.h", "hermes_api.h")

# (fat_suffix, exclude_bin_files) per produced package.
PACKAGE_FLAVORS: tuple[tuple[str, str], ...] = (
    ("", "**/*.pdb"),
    (".Fat", "*.txt"),
)


def stage_headers(source_root: Path, staging_root: Path) -> None:
    """jsi, node-api and hermes API headers -> build/native/include/{jsi,node-api,hermes}."""
    api = source_root / "API"
    include = staging_root / "build" / "native" / "include"

    jsi_dest = ensure_dir(include / "jsi")
    shutil.copytree(api / "jsi" / "jsi", jsi_dest, dirs_exist_ok=True)

    node_api_src = api / "hermes_node_api" / "node_api"
    node_api_dest = ensure_dir(include / "node-api")
    for name in NODE_API_HEADERS:
        copy_file(name, node_api_src, node_api_dest)

    hermes_src = api / "hermes_shared"
    hermes_dest = ensure_dir(include / "hermes")
    for name in HERMES_API_HEADERS:
        copy_file(name, hermes_src, hermes_dest)


def stage_package_files(source_root: Path, staging_root: Path, layout: dict[str, str]) -> Path:
    """License, NOTICE, MSBuild props/targets, nuspec and the uap tag file. Returns the nuspec path."""
    nuget_src = source_root / layout["nuget_dir"]
    package_id = layout["package_id"]

    license_dest = ensure_dir(staging_root / "license")
    copy_file("LICENSE", source_root, license_dest)
    copy_file("NOTICE.txt", nuget_src, license_dest)

    build_native = ensure_dir(staging_root / "build" / "native")
    copy_file(f"{package_id}.props", nuget_src, build_native)
    copy_file(f"{package_id}.targets", nuget_src, build_native)
    copy_file(f"{package_id}.nuspec", nuget_src, staging_root)

    uap = staging_root / "lib" / "uap"
    if not uap.exists():
        ensure_dir(uap)
        (uap / "_._").write_text("")

    return staging_root / f"{package_id}.nuspec"


def package_properties(
    staging_root: Path,
    version: str,
    repo_url: str,
    repo_branch: str,
    repo_commit: str,
    fat_suffix: str,
    exclude_bin_files: str,
) -> str:
    """nuget -Properties value: key=value pairs joined with ';'."""
    return ";".join(
        [
            f"nugetroot={staging_root}",
            f"version={version}",
            f"repoUrl={repo_url}",
            f"repoBranch={repo_branch}",
            f"repoCommit={repo_commit}",
            f"fat_suffix={fat_suffix}",
            f"exclude_bin_files={exclude_bin_files}",
        ]
    )


def pack_command(nuspec: Path, package_root: Path, properties: str) -> str:
    return (
        f'nuget pack "{nuspec}" -OutputDirectory "{package_root}" -NoDefaultExcludes'
        f' -Properties "{properties}"'
    )


def run(run_params: RunParams, version: str, layout: dict[str, str]) -> int:
    """Stage package-level files and produce both NuGet packages. Returns 0; failures raise."""
    source_root = run_params.source_root
    staging_root = run_params.staging_root

    print("📦 Assembling package staging tree...")
    stage_headers(source_root, staging_root)
    nuspec = stage_package_files(source_root, staging_root, layout)
    ensure_dir(run_params.package_root)

    branch = run_checked(
        ["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=source_root, capture=True
    )
    commit = run_checked(["git", "rev-parse", "HEAD"], cwd=source_root, capture=True)

    for fat_suffix, exclude in PACKAGE_FLAVORS:
        props = package_properties(
            staging_root, version, layout["repo_url"], branch, commit, fat_suffix, exclude
        )
        run_checked(pack_command(nuspec, run_params.package_root, props))

    print(f"✅ NuGet packages written to {run_params.package_root}")
    return 0
