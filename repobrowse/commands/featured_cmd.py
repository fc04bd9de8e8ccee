"""
FeaturedCommand — Browse curated repositories in the finder

Pipeline (one synchronous call, one result or one error):

    workspace -> shallow clone -> featured_repos.json -> table -> finder -> repo

The workspace is released on every path out of browse(), including fetch,
parse, and finder failures.
"""

from typing import List, Optional

from ..commands.base import BaseCommand
from ..core.featured import (
    RepoRecord, TABLE_DELIMITER, load_featured, render_table, extract_repo, best_match,
)
from ..errors import SelectorInvocationError
from ..log import get_logger
from ..services.finder import FinderOpts, SuggestionType
from ..services.git import meta
from ..services.workspace import Workspace

logger = get_logger("featured")

WORKSPACE_NAME = "featured"


def featured_finder_opts() -> FinderOpts:
    """Finder options for the featured table: header row, tab columns, repo column first."""
    return FinderOpts(
        header_lines=1,
        delimiter=TABLE_DELIMITER,
        column=1,
        suggestion_type=SuggestionType.SINGLE_SELECTION,
        overrides="--bind 'ctrl-s:toggle-sort'",
    )


class FeaturedCommand(BaseCommand):
    """
    Command for picking a featured repository.

    Fetches the curated list, lets the user choose interactively
    (or matches a query non-interactively), and reports the repo.
    """

    def _fetch_records(self, workspace: Workspace, source: Optional[str]) -> List[RepoRecord]:
        """Clone the metadata repository into the workspace and decode it."""
        featured = self.config.featured
        url, _, _ = meta(source or featured.source)

        self.git.shallow_clone(url, workspace.path_str, depth=featured.depth)
        return load_featured(workspace.path, featured.filename)

    def browse(self, source: Optional[str] = None) -> str:
        """
        Let the user pick a featured repository.

        Args:
            source: Metadata repository (name or URL); defaults to config

        Returns:
            The chosen repo identifier, or "" if nothing usable was chosen

        Raises:
            RepoBrowseError: Any stage failure, with context
        """
        with Workspace.acquire(WORKSPACE_NAME, root=self.workspace_root, unique=True) as workspace:
            records = self._fetch_records(workspace, source)
            table = render_table(records)

            def write_table(stdin):
                try:
                    stdin.write(table)
                except OSError as e:
                    raise SelectorInvocationError("Unable to prompt featured repositories") from e

            try:
                selected, _ = self.finder.call(featured_finder_opts(), write_table)
            except SelectorInvocationError as e:
                raise SelectorInvocationError(
                    "Failed to get repo URL from finder", returncode=e.returncode
                ) from e

        return extract_repo(selected)

    def best_match(self, query: str, source: Optional[str] = None) -> str:
        """Pick the featured repository best matching `query`, without the finder."""
        with Workspace.acquire(WORKSPACE_NAME, root=self.workspace_root, unique=True) as workspace:
            records = self._fetch_records(workspace, source)
        return best_match(records, query)

    def run(self, source: Optional[str] = None, query: Optional[str] = None) -> int:
        """Print the chosen repo. Exit status 1 when nothing usable was chosen."""
        if query is not None:
            repo = self.best_match(query, source=source)
        else:
            repo = self.browse(source=source)

        if not repo:
            logger.info("No featured repository selected")
            return 1

        print(repo)
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'featured'


def register_parser(subparsers):
    """Register featured command parser."""
    p = subparsers.add_parser('featured', help='Browse featured repositories')
    p.add_argument('--source', '-s',
                   help='Metadata repository (user/repo or URL); default from config')
    p.add_argument('--best-match', dest='best_match', metavar='QUERY',
                   help='Pick the best match for QUERY without opening the finder')
    return p


def handle(cli, args):
    """Handle featured command dispatch."""
    return cli._featured_cmd.run(source=args.source, query=args.best_match)
