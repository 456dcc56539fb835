"""NuGet staging layout and package assembly."""

from .assemble import (
    DLL_FILES,
    TOOL_FILES,
    StagingPaths,
    copy_file,
    ensure_staging_paths,
    stage_build_outputs,
    stage_fake_outputs,
)

__all__ = [
    "DLL_FILES",
    "TOOL_FILES",
    "StagingPaths",
    "copy_file",
    "ensure_staging_paths",
    "stage_build_outputs",
    "stage_fake_outputs",
]
