"""
Services — External integration layer for repobrowse

Contains integrations with external systems:
- Workspace: scratch directories under the tool temp root
- Git: repository name resolution and shallow clones
- Finder: fzf / skim subprocess protocol
"""

from .workspace import Workspace, tmp_root, remove_dir, create_dir
from .git import GitIntegration, meta
from .finder import Finder, FinderOpts, FinderResult, SuggestionType

__all__ = [
    # Workspace
    "Workspace", "tmp_root", "remove_dir", "create_dir",
    # Git
    "GitIntegration", "meta",
    # Finder
    "Finder", "FinderOpts", "FinderResult", "SuggestionType",
]
