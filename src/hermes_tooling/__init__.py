"""Build orchestration for Hermes on Windows: platform matrix, CMake phases, NuGet staging."""

__version__ = "0.1.0"
