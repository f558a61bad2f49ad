"""Path helpers for test file names and the balancer server artifact."""

import os
from collections.abc import Iterable
from pathlib import Path

from tlb.exceptions import ServerArtifactNotFoundError

SERVER_ARTIFACT_GLOB = "tlb-alien*"


def relative_file_path(file_name: str | Path, cwd: Path | None = None) -> str:
    """Express a file name relative to the working directory.

    The name is expanded to an absolute path and a leading working
    directory prefix is replaced by ``.``. Paths outside the working
    directory are returned absolute.

    Args:
        file_name: Absolute or relative file name.
        cwd: Working directory. Defaults to the current one.

    Returns:
        The normalised file name, e.g. ``./tests/test_foo.py``.
    """
    base = os.path.abspath(cwd if cwd is not None else Path.cwd())
    absolute = os.path.normpath(os.path.join(base, os.path.expanduser(file_name)))
    if absolute == base or absolute.startswith(base + os.sep):
        return "." + absolute[len(base) :]
    return absolute


def relative_file_paths(
    file_names: Iterable[str | Path], cwd: Path | None = None
) -> list[str]:
    """Apply relative_file_path to every name, preserving order."""
    return [relative_file_path(name, cwd) for name in file_names]


def find_server_jar(root_dir: Path) -> Path:
    """Locate the balancer server artifact under a directory.

    Args:
        root_dir: Directory holding the ``tlb-alien*`` artifact.

    Returns:
        Absolute path of the first matching artifact in sorted order.

    Raises:
        ServerArtifactNotFoundError: If no artifact matches.
    """
    candidates = sorted(root_dir.glob(SERVER_ARTIFACT_GLOB))
    if not candidates:
        msg = f"No {SERVER_ARTIFACT_GLOB} server artifact found in {root_dir}"
        raise ServerArtifactNotFoundError(msg, root_dir=root_dir)
    return candidates[0].resolve()
