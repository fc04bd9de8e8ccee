"""
Featured — Featured repository records and their table form

The remote document is a JSON array:

    [{"repo": "user/name", "description": "...", "tags": ["cli"],
      "stars": 5, "last_updated": "2024-01-01", "category": null}, ...]

Records are rendered as a tab-delimited table for the finder, header first:

    Repo<TAB>Description<TAB>Tags<TAB>Stars<TAB>Last Updated
    user/name<TAB>...<TAB>cli<TAB>5<TAB>2024-01-01

Field values are not escaped. A value containing a tab shifts the columns of
its own row only.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from rapidfuzz import fuzz, utils

from ..errors import DecodeError, ReadError
from ..log import get_logger

logger = get_logger("featured")

FEATURED_FILENAME = "featured_repos.json"

TABLE_DELIMITER = "\t"
TABLE_COLUMNS = ("Repo", "Description", "Tags", "Stars", "Last Updated")
TAG_SEPARATOR = ", "

# Minimum WRatio score (0-100) for a best match to count
BEST_MATCH_CUTOFF = 50.0


@dataclass(frozen=True)
class RepoRecord:
    """One entry of the featured repositories document."""
    repo: str
    description: str
    tags: Tuple[str, ...]
    stars: int
    last_updated: str  # Displayed as-is, never parsed
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'RepoRecord':
        """
        Strict decode of one JSON object.

        Raises:
            ValueError: Missing required field or wrong value type
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")

        repo = _require_str(data, "repo")
        description = _require_str(data, "description")
        last_updated = _require_str(data, "last_updated")

        if "tags" not in data:
            raise ValueError("missing field `tags`")
        tags = data["tags"]
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError("field `tags` must be a list of strings")

        if "stars" not in data:
            raise ValueError("missing field `stars`")
        stars = data["stars"]
        # bool is an int subclass; JSON true is not a star count
        if isinstance(stars, bool) or not isinstance(stars, int):
            raise ValueError("field `stars` must be an integer")
        if stars < 0:
            raise ValueError("field `stars` must not be negative")

        category = data.get("category")
        if category is not None and not isinstance(category, str):
            raise ValueError("field `category` must be a string or null")

        return cls(
            repo=repo,
            description=description,
            tags=tuple(tags),
            stars=stars,
            last_updated=last_updated,
            category=category,
        )

    def to_row(self) -> str:
        """Delimiter-joined fields in table column order (no newline)."""
        return TABLE_DELIMITER.join([
            self.repo,
            self.description,
            TAG_SEPARATOR.join(self.tags),
            str(self.stars),
            self.last_updated,
        ])


def _require_str(data: Dict[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


# =============================================================================
# Parsing
# =============================================================================

def parse_featured(text: str) -> List[RepoRecord]:
    """
    Decode the featured document. All records decode or none do.

    Raises:
        DecodeError: Invalid JSON, non-array document, or a malformed record
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and oversized integer literals
        raise DecodeError("Failed to parse featured repositories JSON") from e

    if not isinstance(data, list):
        raise DecodeError(
            f"Failed to parse featured repositories JSON: expected an array, got {type(data).__name__}"
        )

    records = []
    for index, item in enumerate(data):
        try:
            records.append(RepoRecord.from_dict(item))
        except ValueError as e:
            raise DecodeError(
                f"Failed to parse featured repositories JSON: record {index}: {e}"
            ) from e

    logger.debug("Decoded %d featured record(s)", len(records))
    return records


def load_featured(directory: Union[str, Path], filename: str = FEATURED_FILENAME) -> List[RepoRecord]:
    """
    Read and decode `filename` from the root of `directory`.

    Raises:
        ReadError: File missing or unreadable
        DecodeError: Content malformed
    """
    path = Path(directory) / filename
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(path) from e
    return parse_featured(text)


# =============================================================================
# Rendering
# =============================================================================

def render_table(records: Iterable[RepoRecord]) -> str:
    """Header line plus one line per record, input order preserved."""
    lines = [TABLE_DELIMITER.join(TABLE_COLUMNS)]
    lines.extend(record.to_row() for record in records)
    return "".join(line + "\n" for line in lines)


# =============================================================================
# Extraction
# =============================================================================

def extract_repo(line: str) -> str:
    """
    Repo identifier (first column) of a chosen table row.

    An empty line or one without the delimiter yields "", which callers
    treat as "no usable selection".
    """
    line = line.rstrip("\n")
    if TABLE_DELIMITER not in line:
        return ""
    return line.split(TABLE_DELIMITER, 1)[0]


def best_match(records: Iterable[RepoRecord], query: str,
               cutoff: float = BEST_MATCH_CUTOFF) -> str:
    """
    Non-interactive pick: repo of the record that best matches `query`.

    Scores repo, description and tags with rapidfuzz WRatio (partial and
    word order insensitive, punctuation and case ignored).
    Ties go to the earlier record. Returns "" when nothing reaches `cutoff`.
    """
    if not utils.default_process(query):
        return ""

    best_repo = ""
    best_score = cutoff
    for record in records:
        haystack = " ".join([record.repo, record.description, " ".join(record.tags)])
        score = fuzz.WRatio(query, haystack, processor=utils.default_process)
        if score > best_score or (score == best_score and not best_repo):
            best_repo = record.repo
            best_score = score

    logger.debug("Best match for %r: %r (score %.1f)", query, best_repo, best_score)
    return best_repo
