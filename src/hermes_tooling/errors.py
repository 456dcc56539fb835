"""Error types raised by the build orchestrator. The CLI turns them into exit codes."""

from __future__ import annotations


class BuildToolingError(RuntimeError):
    """Base class for failures that stop the orchestration run."""

    exit_code = 1


class UnsupportedHostError(BuildToolingError):
    """Host CPU architecture cannot drive a Windows build."""


class ToolchainNotFoundError(BuildToolingError):
    """Required installed tooling (vswhere, vcvarsall.bat) is missing."""


class StagingError(BuildToolingError):
    """A mandatory build output was not found while staging."""


class CommandFailedError(BuildToolingError):
    """External command exited non-zero. Carries its exit code and combined output."""

    def __init__(self, returncode: int, command: str, output: str = "") -> None:
        super().__init__(f"Build command failed with exit code: {returncode}")
        self.returncode = returncode
        self.command = command
        self.output = output

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1
