"""
CLI -- Command interface

    repobrowse featured                 pick a featured repo in the finder
    repobrowse featured --best-match q  pick without the finder
    repobrowse config [--set K=V]       show or change settings

The chosen repo goes to stdout; diagnostics and errors go to stderr.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import ConfigManager
from .errors import RepoBrowseError
from .log import configure_logging, get_logger
from .services.finder import Finder
from .services.git import GitIntegration
from .services.workspace import tmp_root
from .commands.featured_cmd import FeaturedCommand
from .commands.config_cmd import ConfigCommand
from . import __version__

logger = get_logger("cli")


class RepoBrowseCLI:
    """
    Context object holding configuration and collaborators.

    Collaborators are built from configuration unless passed in,
    so tests (and embedding tools) can swap the finder or git.
    """

    def __init__(
        self,
        project_dir: Path,
        finder: Optional[Finder] = None,
        git: Optional[GitIntegration] = None,
        workspace_root: Optional[Path] = None,
    ):
        self.project_dir = Path(project_dir)
        self.config_manager = ConfigManager(self.project_dir)
        self.config = self.config_manager.load()

        if finder is None:
            finder = Finder(self.config.finder.command, self.config.finder.overrides)
        self.finder = finder
        self.git = git or GitIntegration()
        self.workspace_root = Path(workspace_root) if workspace_root else tmp_root()

        # Command handlers
        self._featured_cmd = FeaturedCommand(self)
        self._config_cmd = ConfigCommand(self)

    def browse_featured(self, source: Optional[str] = None) -> str:
        """Pick a featured repo interactively. Delegates to FeaturedCommand."""
        return self._featured_cmd.browse(source=source)

    def show_config(self):
        """Show current configuration. Delegates to ConfigCommand."""
        return self._config_cmd.show_config()

    def set_config(self, key: str, value: str, scope: str = "project"):
        """Set a configuration value. Delegates to ConfigCommand."""
        return self._config_cmd.set_config(key, value, scope=scope)


def print_error(error: RepoBrowseError) -> None:
    """Print an error and its causes to stderr."""
    messages = error.chain()
    print(f"Error: {messages[0]}", file=sys.stderr)
    for message in messages[1:]:
        print(f"  Caused by: {message}", file=sys.stderr)


def main(argv=None) -> int:
    """
    Main entry point for the repobrowse CLI.

    Uses command registry pattern for modular command handling.
    Returns the process exit status.
    """
    parser = argparse.ArgumentParser(
        description="repobrowse -- Browse featured repositories",
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("REPOBROWSE_PROJECT_PATH", "."),
        help='Project directory (default: REPOBROWSE_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log diagnostics to stderr'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'repobrowse {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    from .commands import register_all, dispatch, get_registered_commands
    register_all(subparsers)

    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not args.command:
        parser.print_help()
        return 0

    if args.command not in get_registered_commands():
        print(f"Error: Unknown command: {args.command}", file=sys.stderr)
        parser.print_help()
        return 2

    try:
        cli = RepoBrowseCLI(Path(args.project))
        return dispatch(args.command, cli, args) or 0
    except RepoBrowseError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print_error(e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
