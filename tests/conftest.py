"""Pytest fixtures for hermes_tooling tests."""

import io
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from hermes_tooling.build.params import BuildOptions, RunParams
from hermes_tooling.build.toolchain import Toolchain


class FakeProcess:
    """Stand-in for the subprocess.Popen object used by Toolchain.invoke."""

    def __init__(self, returncode: int = 0, output: str | Iterable[str] = "") -> None:
        self.returncode = returncode
        self.stdout = io.StringIO(output) if isinstance(output, str) else iter(output)

    def __enter__(self) -> "FakeProcess":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def wait(self) -> int:
        return self.returncode


class FakeCMake:
    """Stand-in for subprocess.Popen inside Toolchain.invoke.

    Records (command, cwd, env) and writes what the real tools would leave behind:
    CMakeCache.txt on configure, hermes outputs on build, tools/bin/hermesc.exe on --target hermesc.
    """

    def __init__(self, fail_on: str | None = None, returncode: int = 2) -> None:
        self.calls: list[tuple[str, Path, dict]] = []
        self.fail_on = fail_on
        self.returncode = returncode

    def __call__(self, cmd, **kwargs):
        cwd = Path.cwd()
        self.calls.append((cmd, cwd, kwargs.get("env") or {}))
        if self.fail_on and self.fail_on in cmd:
            return FakeProcess(self.returncode, "error: boom\n")
        inner = self.inner(cmd)
        if inner.startswith("cmake --preset="):
            (cwd / "CMakeCache.txt").write_text("# configured\n")
        elif inner.startswith("cmake --build .") and "check-hermes" not in inner:
            shared = cwd / "API" / "hermes_shared"
            shared.mkdir(parents=True, exist_ok=True)
            for name in ("hermes.dll", "hermes.lib", "hermes.pdb"):
                (shared / name).write_bytes(b"dll")
            (cwd / "bin").mkdir(exist_ok=True)
            for name in ("hermes.exe", "hermesc.exe"):
                (cwd / "bin" / name).write_bytes(b"exe")
        return FakeProcess(0, "ok\n")

    @staticmethod
    def inner(cmd: str) -> str:
        """Strip the vcvarsall prefix and the 2>&1 suffix."""
        body = cmd.split(" && ", 1)[-1]
        return body.removesuffix(" 2>&1")

    def commands(self) -> list[str]:
        return [self.inner(c) for c, _, _ in self.calls]

    def commands_in(self, path: Path) -> list[str]:
        return [self.inner(c) for c, cwd, _ in self.calls if cwd.resolve() == path.resolve()]


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    root = tmp_path / "hermes"
    root.mkdir()
    return root


@pytest.fixture
def make_options(source_root: Path, tmp_path: Path) -> Callable[..., BuildOptions]:
    """BuildOptions factory rooted in tmp_path; keyword args override defaults."""

    def _make(**overrides) -> BuildOptions:
        values = {"source_root": source_root, "output_path": tmp_path / "out"}
        values.update(overrides)
        return BuildOptions(**values)

    return _make


@pytest.fixture
def run_params(source_root: Path, tmp_path: Path) -> RunParams:
    return RunParams.from_output(source_root, tmp_path / "out")


@pytest.fixture
def toolchain(tmp_path: Path) -> Toolchain:
    return Toolchain(tmp_path / "VS" / "vcvarsall.bat")


@pytest.fixture
def fake_cmake() -> FakeCMake:
    return FakeCMake()


@pytest.fixture
def make_process() -> type[FakeProcess]:
    return FakeProcess
