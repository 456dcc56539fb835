"""Release: stamp semantic/file versions into the source tree before an official build."""

from .version import run as run_stamp_version
from .version import stamp_version

__all__ = ["run_stamp_version", "stamp_version"]
