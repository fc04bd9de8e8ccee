"""
repobrowse — Pick a featured repository from a curated list

Fetches a featured_repos.json file from a metadata repository, shows it in
an interactive fuzzy finder (fzf or skim), and reports the chosen repo.

Usage:
    repobrowse featured
    repobrowse featured --source user/metadata-repo
    repobrowse featured --best-match "rust cli"
    repobrowse config --set finder.command=sk
"""

__version__ = "0.1.0"

from .errors import (
    RepoBrowseError, WorkspaceError, PathEncodingError, FetchError,
    ReadError, DecodeError, SelectorInvocationError,
)
from .core.featured import (
    RepoRecord, parse_featured, load_featured, render_table, extract_repo, best_match,
)
from .services.workspace import Workspace
from .services.git import GitIntegration, meta
from .services.finder import Finder, FinderOpts, FinderResult, SuggestionType
from .config import Config, ConfigManager, FinderConfig, FeaturedConfig, get_config

__all__ = [
    # Errors
    'RepoBrowseError', 'WorkspaceError', 'PathEncodingError', 'FetchError',
    'ReadError', 'DecodeError', 'SelectorInvocationError',
    # Core
    'RepoRecord', 'parse_featured', 'load_featured', 'render_table', 'extract_repo', 'best_match',
    # Services
    'Workspace', 'GitIntegration', 'meta',
    'Finder', 'FinderOpts', 'FinderResult', 'SuggestionType',
    # Config
    'Config', 'ConfigManager', 'FinderConfig', 'FeaturedConfig', 'get_config',
]
