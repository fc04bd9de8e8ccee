"""
Git Integration — Resolve repository names and fetch them

Featured metadata lives in an ordinary git repository. We only ever need the
latest tree, so clones are shallow (--depth 1 by default).

Name resolution:
- "user/repo"                        -> https://github.com/user/repo
- "https://host/user/repo.git"       -> used verbatim
- "git@host:user/repo.git"           -> used verbatim
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import FetchError
from ..log import get_logger, mask_url

logger = get_logger("git")

GITHUB_URL = "https://github.com"


def meta(name: str) -> Tuple[str, str, str]:
    """
    Resolve a repository name to (url, user, repo).

    Names containing a scheme or an scp-style "@" are taken as URLs.
    Anything else is a GitHub "user/repo" shorthand.
    """
    name = name.strip()
    if "://" in name or "@" in name:
        url = name
    else:
        url = f"{GITHUB_URL}/{name.strip('/')}"

    # Last two components of the path (scp-style uses ':' before the path)
    path = url.rstrip("/").replace(":", "/")
    parts = [p for p in path.split("/") if p]
    repo = parts[-1] if parts else ""
    if repo.endswith(".git"):
        repo = repo[:-4]
    user = parts[-2] if len(parts) >= 2 else ""

    return url, user, repo


class GitIntegration:
    """Thin wrapper over the git executable."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def _run_git(self, args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        """Run a git command, capturing output. Raises OSError if git is missing."""
        return subprocess.run(
            [self.executable] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
        )

    def shallow_clone(self, url: str, destination: Union[str, Path], depth: int = 1) -> None:
        """
        Clone `url` into `destination`, keeping only the last `depth` commits.

        Raises:
            FetchError: On any clone failure (network, auth, invalid remote,
                        git not installed). Not retried.
        """
        logger.debug("Cloning %s into %s (depth %d)", mask_url(url), destination, depth)

        try:
            result = self._run_git(["clone", url, str(destination), "--depth", str(depth)])
        except OSError as e:
            raise FetchError(url, f"could not run {self.executable}") from e

        if result.returncode != 0:
            detail = _last_line(result.stderr) or f"git exited with code {result.returncode}"
            raise FetchError(url, mask_url(detail))

        logger.debug("Cloned %s", mask_url(url))


def _last_line(text: Optional[str]) -> str:
    """Last non-empty line of git's stderr (the actual fatal: message)."""
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return lines[-1] if lines else ""
