"""`hermes-tooling build`: configure, build, test and pack the Windows build matrix."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from hermes_tooling.build.host_aware import CONFIGURATIONS, PLATFORMS
from hermes_tooling.build.matrix import run as run_matrix
from hermes_tooling.build.params import (
    DEFAULT_FILE_VERSION,
    DEFAULT_SEMANTIC_VERSION,
    BuildOptions,
)
from hermes_tooling.errors import BuildToolingError
from hermes_tooling.layout import LAYOUT_FILE_NAME, load_layout

EXAMPLES = """\
Note: All boolean flags support negation (e.g., --no-build, --no-test)
      CMake is configured automatically if the build folder is empty and --build is used

Examples:
  hermes-tooling build --configure --no-build        # Configure only, don't build
  hermes-tooling build                               # Build (will configure if needed)
  hermes-tooling build --platform arm64 --uwp        # Build ARM64 UWP
  hermes-tooling build --clean-build --msvc          # Clean and build with MSVC
  hermes-tooling build --targets hermesc             # Build only hermesc target
  hermes-tooling build --targets hermesc,libshared   # Build multiple targets
"""


def _lower(value: str) -> str:
    return value.lower()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="hermes-tooling build",
        description="Build Hermes for Windows: clean, configure, build, test, pack.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    flag = argparse.BooleanOptionalAction
    ap.add_argument(
        "--configure", action=flag, default=False, help="Configure CMake before the build"
    )
    ap.add_argument("--build", action=flag, default=True, help="Build binaries (default: on)")
    ap.add_argument(
        "--targets",
        action="append",
        default=[],
        help="CMake build target(s), comma-separated, repeatable (default: all targets). "
        "Common targets: hermesc, libshared, hermes, APITests",
    )
    ap.add_argument("--test", action=flag, default=False, help="Run tests")
    ap.add_argument("--jstest", action=flag, default=False, help="Run JS regression tests")
    ap.add_argument("--pack", action=flag, default=False, help="Create NuGet packages")
    ap.add_argument(
        "--clean-all", action=flag, default=False, help="Delete the whole output folder"
    )
    ap.add_argument(
        "--clean-build",
        action=flag,
        default=False,
        help="Delete the build folder for the targeted configurations",
    )
    ap.add_argument(
        "--clean-tools",
        action=flag,
        default=False,
        help="Delete the tools folder used for cross-platform builds",
    )
    ap.add_argument(
        "--clean-pkg", action=flag, default=False, help="Delete NuGet pkg and pkg-staging folders"
    )
    ap.add_argument(
        "--msvc",
        action=flag,
        default=False,
        help="Use MSVC compiler instead of Clang (ARM64EC always uses MSVC)",
    )
    ap.add_argument("--uwp", action=flag, default=False, help="Build for UWP instead of Win32")
    ap.add_argument(
        "--platform",
        action="append",
        type=_lower,
        help="Target platform(s), repeatable (default: x64) "
        f"[valid values: {', '.join(PLATFORMS)}]",
    )
    ap.add_argument(
        "--configuration",
        action="append",
        type=_lower,
        help="Build configuration(s), repeatable (default: release) "
        f"[valid values: {', '.join(CONFIGURATIONS)}]",
    )
    ap.add_argument(
        "--source-root", type=Path, default=Path.cwd(), help="Hermes source root (default: cwd)"
    )
    ap.add_argument(
        "--output-path",
        type=Path,
        default=None,
        help="Output directory (default: <source-root>/out)",
    )
    ap.add_argument(
        "--layout",
        type=Path,
        default=None,
        help=f"Layout overrides (default: <source-root>/{LAYOUT_FILE_NAME})",
    )
    ap.add_argument(
        "--semantic-version",
        type=_lower,
        default=DEFAULT_SEMANTIC_VERSION,
        help=f"NuGet package semantic version (default: {DEFAULT_SEMANTIC_VERSION})",
    )
    ap.add_argument(
        "--file-version",
        type=_lower,
        default=DEFAULT_FILE_VERSION,
        help=f"Version set in binary files (default: {DEFAULT_FILE_VERSION})",
    )
    ap.add_argument(
        "--windows-sdk-version",
        type=_lower,
        default="",
        help='Windows SDK version (e.g., "10.0.19041.0")',
    )
    ap.add_argument(
        "--fake-build",
        action=flag,
        default=False,
        help="Stage placeholder binaries instead of building (for debugging staging and packing)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def _validate_choices(
    ap: argparse.ArgumentParser, name: str, values: list[str], valid: tuple[str, ...]
) -> None:
    for value in values:
        if value not in valid:
            print(f"Invalid value for {name}: {value}", file=sys.stderr)
            print(f"Valid values are: {', '.join(valid)}", file=sys.stderr)
            ap.print_usage(sys.stderr)
            sys.exit(1)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def parse_options(argv: list[str]) -> tuple[BuildOptions, bool]:
    """argv -> (BuildOptions, verbose). Invalid platform/configuration exits 1 before anything runs."""
    ap = build_parser()
    args = ap.parse_args(argv)

    platforms = args.platform or ["x64"]
    configurations = args.configuration or ["release"]
    _validate_choices(ap, "platform", platforms, PLATFORMS)
    _validate_choices(ap, "configuration", configurations, CONFIGURATIONS)
    configure_logging(args.verbose)

    source_root = args.source_root.resolve()
    layout_path = args.layout or source_root / LAYOUT_FILE_NAME
    if args.layout is not None and not layout_path.is_file():
        print(f"❌ Layout file not found: {layout_path}", file=sys.stderr)
        sys.exit(1)
    try:
        layout = load_layout(layout_path)
    except (OSError, ValueError) as e:
        print(f"❌ Invalid layout file {layout_path}: {e}", file=sys.stderr)
        sys.exit(1)

    options = BuildOptions(
        source_root=source_root,
        output_path=(args.output_path or source_root / "out").resolve(),
        platforms=tuple(platforms),
        configurations=tuple(configurations),
        targets=tuple(args.targets),
        configure=args.configure,
        build=args.build,
        test=args.test,
        jstest=args.jstest,
        pack=args.pack,
        clean_all=args.clean_all,
        clean_build=args.clean_build,
        clean_tools=args.clean_tools,
        clean_pkg=args.clean_pkg,
        uwp=args.uwp,
        msvc=args.msvc,
        semantic_version=args.semantic_version,
        file_version=args.file_version,
        windows_sdk_version=args.windows_sdk_version,
        fake_build=args.fake_build,
        layout=layout,
    )
    return options, args.verbose


def run_build_argv(argv: list[str] | None = None) -> None:
    """Parse argv and run the build matrix. argv defaults to sys.argv[2:] when called from main."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    options, _ = parse_options(argv)
    try:
        rc = run_matrix(options)
    except BuildToolingError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(e.exit_code)
    except OSError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(rc)
