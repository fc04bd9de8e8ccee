"""
Errors — Failure kinds for the featured browse pipeline

Every error carries a human-readable message naming the failing operation.
Context is layered with `raise ... from ...`; chain() walks it back for display:

    Error: Failed to get repo URL from finder
      Caused by: No selection made (finder exited with code 130)
"""

from pathlib import Path
from typing import List, Optional, Union

from .log import mask_url


class RepoBrowseError(Exception):
    """Base exception for all repobrowse errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def chain(self) -> List[str]:
        """Messages from this error down through its causes."""
        messages = []
        current: Optional[BaseException] = self
        while current is not None:
            text = getattr(current, "message", None) or str(current) or type(current).__name__
            messages.append(text)
            current = current.__cause__
        return messages


class WorkspaceError(RepoBrowseError):
    """Scratch directory could not be created."""


class PathEncodingError(RepoBrowseError):
    """Path is not representable as the text form collaborators expect."""

    def __init__(self, path: Union[str, Path]):
        self.path = path
        super().__init__(f"Invalid path: {path!r}")


class FetchError(RepoBrowseError):
    """Clone of the metadata repository failed."""

    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.detail = detail
        message = f"Failed to clone `{mask_url(url)}`"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ReadError(RepoBrowseError):
    """Metadata file missing or unreadable."""

    def __init__(self, path: Union[str, Path], message: str = "Unable to fetch featured repositories JSON file"):
        self.path = path
        super().__init__(f"{message} ({path})")


class DecodeError(RepoBrowseError):
    """Metadata document is not valid JSON or does not match the record shape."""


class SelectorInvocationError(RepoBrowseError):
    """Finder subprocess could not be spawned, fed, or produced no selection."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)
