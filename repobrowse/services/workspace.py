"""
Workspace — Scratch directories for staging clones

Each browse invocation owns one directory under the tool temp root:

    with Workspace.acquire("featured", unique=True) as ws:
        git.shallow_clone(url, ws.path_str)
        ...
    # directory is gone here, on success and on error

Release is best-effort: a failed cleanup is logged, never raised, so it cannot
mask the error that ended the pipeline.
"""

import itertools
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import xxhash

from ..errors import WorkspaceError, PathEncodingError
from ..log import get_logger

logger = get_logger("workspace")

TMP_DIR_NAME = "repobrowse"

_sequence = itertools.count()


def tmp_root() -> Path:
    """Process/tool scoped temporary root."""
    return Path(tempfile.gettempdir()) / TMP_DIR_NAME


def remove_dir(path: Union[str, Path]) -> None:
    """Recursively remove a directory. A missing path is not an error."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass


def create_dir(path: Union[str, Path]) -> None:
    """Create a directory and its parents."""
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"Failed to create directory {path}") from e


def path_to_str(path: Union[str, Path]) -> str:
    """Text form of a path, as handed to git and the finder."""
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise PathEncodingError(path) from e
    return text


def _unique_suffix() -> str:
    """Per-invocation suffix (xxhash of timestamp, pid and sequence)."""
    seed = f"{datetime.now(timezone.utc).isoformat()}:{os.getpid()}:{next(_sequence)}"
    return xxhash.xxh64(seed.encode()).hexdigest()[:12]


class Workspace:
    """Exclusively owned scratch directory, removed on release."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._released = False

    @classmethod
    def acquire(cls, name: str, root: Optional[Path] = None, unique: bool = False) -> 'Workspace':
        """
        Create a fresh, empty directory named `name` under the temp root.

        Args:
            name: Subpath component (e.g. "featured")
            root: Parent directory (default: tmp_root())
            unique: Append a per-invocation suffix so overlapping
                    invocations never share a directory

        Raises:
            WorkspaceError: If the directory cannot be created
        """
        dir_name = f"{name}-{_unique_suffix()}" if unique else name
        path = Path(root if root is not None else tmp_root()) / dir_name

        # Stale data from an earlier run that was killed mid-way
        try:
            remove_dir(path)
        except OSError as e:
            logger.debug("Could not remove stale workspace %s: %s", path, e)
            if path.exists():
                raise WorkspaceError(f"Unable to clear stale workspace {path}") from e

        create_dir(path)
        logger.debug("Acquired workspace %s", path)
        return cls(path)

    @property
    def path_str(self) -> str:
        return path_to_str(self.path)

    def release(self) -> None:
        """Remove the directory. Failures are logged, not raised."""
        if self._released:
            return
        self._released = True
        try:
            remove_dir(self.path)
            logger.debug("Released workspace %s", self.path)
        except OSError as e:
            logger.warning("Could not remove workspace %s: %s", self.path, e)

    def __enter__(self) -> 'Workspace':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
