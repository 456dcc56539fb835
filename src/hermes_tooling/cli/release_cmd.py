"""`hermes-tooling release` subcommands: stamp-version."""

import sys
from pathlib import Path

from hermes_tooling.build.params import DEFAULT_FILE_VERSION
from hermes_tooling.release.version import run as run_stamp_version


def run_release_argv(argv: list[str] | None = None) -> None:
    """Parse release subcommand from argv and run. argv defaults to sys.argv[2:] when called from main."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("hermes-tooling release: missing subcommand (stamp-version)", file=sys.stderr)
        sys.exit(1)
    cmd = argv[0]
    rest = argv[1:]

    if cmd == "stamp-version":
        semantic_version = None
        file_version = DEFAULT_FILE_VERSION
        source_root = Path.cwd()
        i = 0
        while i < len(rest):
            if rest[i] == "--semantic-version" and i + 1 < len(rest):
                semantic_version = rest[i + 1]
                i += 2
            elif rest[i] == "--file-version" and i + 1 < len(rest):
                file_version = rest[i + 1]
                i += 2
            elif rest[i] == "--source-root" and i + 1 < len(rest):
                source_root = Path(rest[i + 1]).resolve()
                i += 2
            else:
                i += 1
        if not semantic_version:
            print(
                "hermes-tooling release stamp-version: --semantic-version is required",
                file=sys.stderr,
            )
            sys.exit(1)
        rc = run_stamp_version(source_root, semantic_version, file_version)
        sys.exit(rc)

    print("hermes-tooling release: use subcommand 'stamp-version'", file=sys.stderr)
    sys.exit(1)
