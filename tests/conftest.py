"""
Shared pytest fixtures for the repobrowse test suite.

Provides:
- isolation from the developer's real config and environment
- a shell-script stand-in for fzf that records its argv and input
- sample featured documents

Usage in tests:
    def test_something(fake_finder):
        finder_path, record = fake_finder(line=2)
        finder = Finder(str(finder_path))
        ...
        assert record.args()[0] == "--header-lines"
"""

import json
import logging
import os
import stat
import subprocess
from pathlib import Path

import pytest

from repobrowse.config import ConfigManager


SAMPLE_RECORDS = [
    {
        "repo": "grenkoca/cheats",
        "description": "demo",
        "tags": ["cli", "rust"],
        "stars": 5,
        "last_updated": "2024-01-01",
        "category": None,
    },
    {
        "repo": "denisidoro/cheats",
        "description": "Community cheatsheets for shells and tools",
        "tags": ["shell", "git", "docker"],
        "stars": 120,
        "last_updated": "2024-03-15",
        "category": "general",
    },
    {
        "repo": "someone/kubectl-cheats",
        "description": "Kubernetes one-liners",
        "tags": [],
        "stars": 0,
        "last_updated": "2023-11-30",
    },
]


# =============================================================================
# Availability checks
# =============================================================================

def git_is_available() -> bool:
    """Check if git is installed and working."""
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            text=True,
            timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


requires_git = pytest.mark.skipif(
    not git_is_available(),
    reason="Git is not installed or not available"
)

requires_posix_shell = pytest.mark.skipif(
    os.name != "posix",
    reason="Fake finder is a /bin/sh script"
)


# =============================================================================
# Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from ~/.repobrowse and REPOBROWSE_* variables."""
    user_dir = tmp_path / "home" / ".repobrowse"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", user_dir / "config.yaml")
    for key in ("REPOBROWSE_FINDER", "REPOBROWSE_FINDER_OVERRIDES",
                "REPOBROWSE_FEATURED_SOURCE", "REPOBROWSE_PROJECT_PATH"):
        monkeypatch.delenv(key, raising=False)
    return user_dir


@pytest.fixture(autouse=True)
def reset_package_logger():
    """main() reconfigures the package logger; undo it after each test."""
    logger = logging.getLogger("repobrowse")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


# =============================================================================
# Featured documents
# =============================================================================

@pytest.fixture
def sample_records():
    """Raw featured records (JSON-ready dicts)."""
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture
def sample_json(sample_records):
    """Featured document text."""
    return json.dumps(sample_records)


@pytest.fixture
def metadata_repo(tmp_path, sample_json):
    """A local git repository holding featured_repos.json, cloneable via file://."""
    if not git_is_available():
        pytest.skip("Git is not available")

    repo = tmp_path / "metadata_repo"
    repo.mkdir()

    try:
        subprocess.run(["git", "init"], cwd=repo, capture_output=True, check=True)
        subprocess.run(["git", "config", "user.email", "test@test.com"], cwd=repo, capture_output=True)
        subprocess.run(["git", "config", "user.name", "Test User"], cwd=repo, capture_output=True)

        (repo / "featured_repos.json").write_text(sample_json, encoding="utf-8")
        subprocess.run(["git", "add", "."], cwd=repo, capture_output=True, check=True)
        subprocess.run(["git", "commit", "-m", "Add featured list"], cwd=repo, capture_output=True, check=True)
    except subprocess.CalledProcessError:
        pytest.skip("Could not create git repository")

    return repo


# =============================================================================
# Fake finder
# =============================================================================

class FinderRecording:
    """What the fake finder saw."""

    def __init__(self, args_file: Path, input_file: Path):
        self.args_file = args_file
        self.input_file = input_file

    def args(self):
        if not self.args_file.exists():
            return []
        return self.args_file.read_text().splitlines()

    def input(self) -> str:
        if not self.input_file.exists():
            return ""
        return self.input_file.read_text(encoding="utf-8")


@pytest.fixture
def fake_finder(tmp_path):
    """
    Factory for a /bin/sh stand-in for fzf.

    The script records argv and stdin, prints `output` (if given) or
    line `line` of its input, and exits with `code`.
    """
    if os.name != "posix":
        pytest.skip("Fake finder is a /bin/sh script")

    counter = {"n": 0}

    def make(line: int = 2, code: int = 0, output: str = None):
        counter["n"] += 1
        base = tmp_path / f"finder{counter['n']}"
        base.mkdir()
        args_file = base / "args"
        input_file = base / "input"
        script = base / "fake-fzf"

        if output is not None:
            emit = f"printf '%s' '{output}'"
        else:
            emit = f"sed -n '{line}p' \"{input_file}\""

        script.write_text(
            "#!/bin/sh\n"
            f"printf '%s\\n' \"$@\" > \"{args_file}\"\n"
            f"cat > \"{input_file}\"\n"
            f"{emit}\n"
            f"exit {code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script, FinderRecording(args_file, input_file)

    return make
