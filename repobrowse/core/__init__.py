"""
Core — Featured repository records, table rendering, selection parsing
"""

from .featured import (
    RepoRecord,
    FEATURED_FILENAME,
    TABLE_DELIMITER,
    TABLE_COLUMNS,
    parse_featured,
    load_featured,
    render_table,
    extract_repo,
    best_match,
)

__all__ = [
    'RepoRecord',
    'FEATURED_FILENAME', 'TABLE_DELIMITER', 'TABLE_COLUMNS',
    'parse_featured', 'load_featured', 'render_table', 'extract_repo', 'best_match',
]
