"""Run-wide paths, per-cell build parameters and the matrix parameter resolver."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from hermes_tooling.build.host_aware import is_cross_build
from hermes_tooling.helpers import app_model_name, split_targets
from hermes_tooling.layout import resolve_layout

log = logging.getLogger(__name__)

DEFAULT_FILE_VERSION = "0.0.0.0"
DEFAULT_SEMANTIC_VERSION = "0.0.0"

# Clang 19.x linker fails for ARM64EC (LLVM #113658); MSVC is forced there.
MSVC_FORCED_PLATFORMS = frozenset({"arm64ec"})


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Everything the caller asked for. Phase switches, matrix axes, versions."""

    source_root: Path
    output_path: Path
    platforms: tuple[str, ...] = ("x64",)
    configurations: tuple[str, ...] = ("release",)
    targets: tuple[str, ...] = ()
    configure: bool = False
    build: bool = True
    test: bool = False
    jstest: bool = False
    pack: bool = False
    clean_all: bool = False
    clean_build: bool = False
    clean_tools: bool = False
    clean_pkg: bool = False
    uwp: bool = False
    msvc: bool = False
    semantic_version: str = DEFAULT_SEMANTIC_VERSION
    file_version: str = DEFAULT_FILE_VERSION
    windows_sdk_version: str = ""
    fake_build: bool = False
    layout: dict[str, str] = field(default_factory=lambda: resolve_layout(None))

    @property
    def needs_toolchain(self) -> bool:
        """True when some cell phase will invoke CMake through vcvarsall."""
        if self.fake_build:
            return False
        return self.configure or self.build or self.test or self.jstest


@dataclass(frozen=True, slots=True)
class RunParams:
    """Process-wide output locations, fixed for the invocation."""

    source_root: Path
    output_root: Path

    @property
    def build_root(self) -> Path:
        return self.output_root / "build"

    @property
    def tools_root(self) -> Path:
        return self.output_root / "tools"

    @property
    def staging_root(self) -> Path:
        return self.output_root / "pkg-staging"

    @property
    def package_root(self) -> Path:
        return self.output_root / "pkg"

    @classmethod
    def from_output(cls, source_root: Path, output_path: Path) -> RunParams:
        return cls(source_root=source_root.resolve(), output_root=output_path.resolve())


@dataclass(frozen=True, slots=True)
class MatrixCell:
    platform: str
    configuration: str
    is_uwp: bool
    host_arch: str
    use_msvc: bool

    @property
    def app_model(self) -> str:
        return app_model_name(self.is_uwp)

    @property
    def is_cross(self) -> bool:
        return is_cross_build(self.host_arch, self.platform, self.is_uwp)


@dataclass(frozen=True, slots=True)
class BuildParams:
    """One cell plus where it builds and which targets. Never mutated after resolve()."""

    cell: MatrixCell
    build_path: Path
    tools_path: Path
    targets: tuple[str, ...] = ()
    has_custom_targets: bool = False

    @property
    def platform(self) -> str:
        return self.cell.platform

    @property
    def configuration(self) -> str:
        return self.cell.configuration

    @property
    def is_uwp(self) -> bool:
        return self.cell.is_uwp

    @property
    def host_arch(self) -> str:
        return self.cell.host_arch

    @property
    def use_msvc(self) -> bool:
        return self.cell.use_msvc

    @property
    def is_cross(self) -> bool:
        return self.cell.is_cross


def build_path_for(build_root: Path, is_uwp: bool, platform: str, configuration: str) -> Path:
    """build_root/<appmodel>-<platform>-<configuration>."""
    return build_root / f"{app_model_name(is_uwp)}-{platform}-{configuration}"


def effective_msvc(platform: str, user_msvc: bool) -> bool:
    """MSVC if requested, or forced for platforms Clang cannot link."""
    if user_msvc:
        return True
    if platform in MSVC_FORCED_PLATFORMS:
        log.warning("Forcing MSVC for %s (Clang 19.x linker issue, LLVM #113658)", platform)
        return True
    return False


def resolve(
    platform: str,
    configuration: str,
    run_params: RunParams,
    options: BuildOptions,
    host_arch: str,
) -> BuildParams:
    """Derive the full parameter set for one (platform, configuration) cell."""
    cell = MatrixCell(
        platform=platform,
        configuration=configuration,
        is_uwp=options.uwp,
        host_arch=host_arch,
        use_msvc=effective_msvc(platform, options.msvc),
    )
    user_targets = split_targets(options.targets)
    if user_targets:
        targets = user_targets
    elif cell.is_cross:
        targets = (options.layout["cross_default_target"],)
    else:
        targets = ()
    return BuildParams(
        cell=cell,
        build_path=build_path_for(run_params.build_root, options.uwp, platform, configuration),
        tools_path=run_params.tools_root,
        targets=targets,
        has_custom_targets=bool(user_targets),
    )


def host_tool_params(params: BuildParams, options: BuildOptions) -> BuildParams:
    """Synthetic release cell for the host itself, building only the host compiler into tools_path."""
    cell = MatrixCell(
        platform=params.host_arch,
        configuration="release",
        is_uwp=False,
        host_arch=params.host_arch,
        use_msvc=options.msvc,
    )
    return BuildParams(
        cell=cell,
        build_path=params.tools_path,
        tools_path=params.tools_path,
        targets=(options.layout["host_tool_target"],),
        has_custom_targets=True,
    )
