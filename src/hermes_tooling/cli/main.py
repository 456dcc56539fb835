"""Main CLI entry point for Hermes Windows build tooling."""

import sys

from hermes_tooling.cli import build as build_cli
from hermes_tooling.cli import release_cmd


def _print_usage() -> None:
    print("Usage: hermes-tooling <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  build [options]        - Clean, configure, build, test and pack the platform matrix",
        file=sys.stderr,
    )
    print(
        "  release stamp-version  - Write release versions into CMakeLists.txt and npm/package.json",
        file=sys.stderr,
    )
    print("Run 'hermes-tooling build --help' for build options.", file=sys.stderr)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        _print_usage()
        sys.exit(1)

    command = sys.argv[1]

    if command in ("-h", "--help"):
        _print_usage()
        sys.exit(0)
    elif command == "build":
        build_cli.run_build_argv()
    elif command == "release":
        release_cmd.run_release_argv()
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
