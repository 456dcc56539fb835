"""Build matrix for Hermes on Windows: host-aware classification, per-cell parameters, CMake phases."""

from .host_aware import (
    CONFIGURATIONS,
    PLATFORMS,
    TARGET_TRIPLES,
    detect_host_architecture,
    is_cross_build,
)
from .params import BuildOptions, BuildParams, MatrixCell, RunParams, resolve

__all__ = [
    "CONFIGURATIONS",
    "PLATFORMS",
    "TARGET_TRIPLES",
    "BuildOptions",
    "BuildParams",
    "MatrixCell",
    "RunParams",
    "detect_host_architecture",
    "is_cross_build",
    "resolve",
]
