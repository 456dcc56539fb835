"""Stamp release versions into CMakeLists.txt and npm/package.json before building.

Nothing happens for developer builds (file version 0.0.0.0 or empty semantic version).
A 0.0.0* semantic version means "not a release"; the file version is used for
the CMake project version instead.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

from hermes_tooling.build.params import DEFAULT_FILE_VERSION
from hermes_tooling.helpers import delete_dir

CMAKE_VERSION_PLACEHOLDER = "VERSION 0.12.0"
_PACKAGE_JSON_VERSION = re.compile(r'"version": ".*",')

# Sources excluded from official builds for component governance.
GOVERNANCE_EXCLUDED_DIRS = (Path("unsupported") / "juno",)


def is_release_build(file_version: str) -> bool:
    return bool(file_version.strip()) and file_version.strip() != DEFAULT_FILE_VERSION


def cmake_version(semantic_version: str, file_version: str) -> str:
    """Version for CMake's project(): semantic unless it is a 0.0.0 placeholder."""
    if semantic_version.startswith("0.0.0"):
        return file_version
    return semantic_version


def remove_governance_files(source_root: Path, file_version: str) -> list[Path]:
    """Delete unsupported sources for official builds. Returns removed directories."""
    if not is_release_build(file_version):
        return []
    removed = []
    for rel in GOVERNANCE_EXCLUDED_DIRS:
        if delete_dir(source_root / rel):
            removed.append(source_root / rel)
    return removed


def stamp_version(source_root: Path, semantic_version: str, file_version: str) -> bool:
    """Rewrite CMakeLists.txt VERSION and npm/package.json version. Returns True if stamped."""
    if not semantic_version.strip() or not is_release_build(file_version):
        return False

    hermes_version = cmake_version(semantic_version, file_version)

    cmake_lists = source_root / "CMakeLists.txt"
    text = cmake_lists.read_text(encoding="utf-8")
    cmake_lists.write_text(
        text.replace(CMAKE_VERSION_PLACEHOLDER, f"VERSION {hermes_version}"), encoding="utf-8"
    )

    package_json = source_root / "npm" / "package.json"
    text = package_json.read_text(encoding="utf-8")
    package_json.write_text(
        _PACKAGE_JSON_VERSION.sub(f'"version": "{semantic_version}",', text, count=1),
        encoding="utf-8",
    )

    print(f"Semantic version set to {semantic_version}")
    print(f"Hermes version set to {hermes_version}")
    return True


def run(source_root: Path, semantic_version: str, file_version: str) -> int:
    """Governance cleanup plus version stamp. Returns 0 or 1."""
    try:
        for removed in remove_governance_files(source_root, file_version):
            print(f"Removed {removed}")
        stamp_version(source_root, semantic_version, file_version)
    except OSError as e:
        print(f"❌ Version stamping failed: {e}", file=sys.stderr)
        return 1
    return 0
