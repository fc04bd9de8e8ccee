"""
BaseCommand — Shared foundation for all CLI commands

Provides access to CLI resources via composition.
Commands receive the CLI instance and access its resources through properties.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cli import RepoBrowseCLI


class BaseCommand:
    """
    Base class for CLI commands with access to shared resources.

    Commands don't construct collaborators themselves; the CLI context
    object is the single place they are configured.
    """

    def __init__(self, cli: 'RepoBrowseCLI'):
        """
        Initialize command with CLI instance.

        Args:
            cli: The main RepoBrowseCLI instance holding all resources
        """
        self._cli = cli

    @property
    def project_dir(self):
        """Project root directory."""
        return self._cli.project_dir

    @property
    def config(self):
        """Application configuration."""
        return self._cli.config

    @property
    def config_manager(self):
        """Configuration loader/persister."""
        return self._cli.config_manager

    @property
    def finder(self):
        """Configured interactive finder."""
        return self._cli.finder

    @property
    def git(self):
        """Git integration for fetching metadata repositories."""
        return self._cli.git

    @property
    def workspace_root(self):
        """Parent directory for scratch workspaces."""
        return self._cli.workspace_root
