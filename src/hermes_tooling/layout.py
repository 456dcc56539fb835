"""Default naming layout for the Hermes Windows build. Paths are relative to source_root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

LAYOUT_FILE_NAME = "hermes-build.yaml"

# hermes-windows defaults; override via hermes-build.yaml for forks.
DEFAULT_LAYOUT: dict[str, str] = {
    "host_tool_target": "hermesc",
    "host_tool_exe": "hermesc.exe",
    "cross_default_target": "libshared",
    "js_test_target": "check-hermes",
    "import_host_compilers": "ImportHostCompilers.cmake",
    "preset_prefix": "ninja",
    "package_id": "Microsoft.JavaScript.Hermes",
    "nuget_dir": ".ado/Nuget",
    "bash_alias_dir": ".ado/scripts/bash-alias",
    "repo_url": "https://github.com/microsoft/hermes-windows",
}


def resolve_layout(layout: dict[str, Any] | None) -> dict[str, str]:
    """Return layout dict with defaults filled. Unknown keys are ignored."""
    if layout is None:
        return dict(DEFAULT_LAYOUT)
    out = dict(DEFAULT_LAYOUT)
    out.update({k: str(v) for k, v in layout.items() if k in out})
    return out


def load_layout(path: Path | None) -> dict[str, str]:
    """Read layout overrides from a YAML mapping. Missing file or None -> defaults."""
    if path is None or not path.is_file():
        return resolve_layout(None)
    with path.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"Layout file is not valid YAML: {path}: {e}"
            raise ValueError(msg) from e
    if not isinstance(data, dict):
        msg = f"Layout file must contain a mapping: {path}"
        raise ValueError(msg)
    unknown = sorted(set(data) - set(DEFAULT_LAYOUT))
    if unknown:
        log.warning("Ignoring unknown layout keys in %s: %s", path, ", ".join(unknown))
    return resolve_layout(data)
