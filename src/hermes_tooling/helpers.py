"""Shared helpers for hermes_tooling (paths, target lists, app models, timing).

Used by build, staging, release and cli modules.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

# --- App model ---

WIN32 = "win32"
UWP = "uwp"
APP_MODELS = (WIN32, UWP)


def app_model_name(is_uwp: bool) -> str:
    """Directory tag for the app model: uwp or win32."""
    return UWP if is_uwp else WIN32


# --- Targets ---


def split_targets(values: Iterable[str]) -> tuple[str, ...]:
    """Flatten comma-separated target lists; strip, drop empties, dedupe keeping first appearance.

    ["a, b", "b", "c,a"] -> ("a", "b", "c")
    """
    seen: dict[str, None] = {}
    for value in values:
        for name in value.split(","):
            name = name.strip()
            if name:
                seen.setdefault(name, None)
    return tuple(seen)


# --- Filesystem ---


def ensure_dir(path: Path) -> Path:
    """mkdir -p; returns path."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def delete_dir(path: Path) -> bool:
    """rm -rf. Returns True if something was removed."""
    if not path.exists():
        return False
    shutil.rmtree(path, ignore_errors=False)
    return True


# --- Timing ---


def format_elapsed(seconds: float) -> str:
    """HH:MM:SS for a duration in seconds."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
