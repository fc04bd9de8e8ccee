"""
Finder — Drive an external fuzzy finder (fzf or skim) over stdin/stdout

Protocol:
- candidates are written to the finder's stdin, one per line
- the finder owns the terminal (stderr + /dev/tty) while the user picks
- on exit, the chosen line(s) arrive on stdout

Exit codes (shared by fzf and sk):
    0    selection made
    1    no match
    2    error
    130  interrupted (ESC / CTRL-C)

call() blocks until the user is done; there is no timeout.
"""

import shlex
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, IO, List, Optional, Tuple

from ..errors import RepoBrowseError, SelectorInvocationError
from ..log import get_logger

logger = get_logger("finder")

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_INTERRUPTED = 130


class SuggestionType(Enum):
    """How many lines the user may pick."""
    SINGLE_SELECTION = "single"
    MULTIPLE_SELECTIONS = "multiple"
    # Like single, but the typed query counts when nothing matches
    SINGLE_RECOMMENDATION = "recommendation"


@dataclass
class FinderOpts:
    """Per-call finder options."""
    header_lines: int = 0
    delimiter: Optional[str] = None
    column: Optional[int] = None  # 1-based match/sort column
    suggestion_type: SuggestionType = SuggestionType.SINGLE_SELECTION
    overrides: Optional[str] = None  # Raw flags, shell-quoted
    prompt: Optional[str] = None
    query: Optional[str] = None


@dataclass
class FinderResult:
    """What the finder reported besides the chosen line."""
    returncode: int
    query: Optional[str] = None
    lines: List[str] = field(default_factory=list)


class Finder:
    """
    A configured finder executable.

    Args:
        command: Executable name or path ("fzf", "sk")
        overrides: Flags from configuration, appended to every call
    """

    def __init__(self, command: str = "fzf", overrides: Optional[str] = None):
        self.command = command
        self.overrides = overrides

    def build_command(self, opts: FinderOpts) -> List[str]:
        """Translate options into an argv list."""
        cmd = [self.command]

        if opts.header_lines > 0:
            cmd.extend(["--header-lines", str(opts.header_lines)])
        if opts.delimiter is not None:
            cmd.extend(["--delimiter", opts.delimiter])
        if opts.column is not None:
            cmd.extend(["--nth", str(opts.column)])

        if opts.suggestion_type is SuggestionType.MULTIPLE_SELECTIONS:
            cmd.append("--multi")
        elif opts.suggestion_type is SuggestionType.SINGLE_RECOMMENDATION:
            cmd.append("--print-query")

        if opts.prompt:
            cmd.extend(["--prompt", opts.prompt])
        if opts.query:
            cmd.extend(["--query", opts.query])

        # Config overrides first so per-call overrides win
        for raw in (self.overrides, opts.overrides):
            if raw:
                try:
                    cmd.extend(shlex.split(raw))
                except ValueError as e:
                    raise SelectorInvocationError(f"Invalid finder overrides: {raw}") from e

        return cmd

    def call(self, opts: FinderOpts, stdin_fn: Callable[[IO[str]], None]) -> Tuple[str, FinderResult]:
        """
        Run the finder and return (chosen line, result metadata).

        Args:
            opts: Finder options
            stdin_fn: Writes candidates to the finder's stdin (a text stream)

        Raises:
            SelectorInvocationError: Spawn failure, write failure, or no selection
        """
        cmd = self.build_command(opts)
        logger.debug("Launching finder: %s", cmd)

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                encoding="utf-8",
            )
        except OSError as e:
            raise SelectorInvocationError(f"Failed to spawn finder `{self.command}`") from e

        try:
            stdin_fn(process.stdin)
            process.stdin.close()
        except RepoBrowseError:
            self._reap(process)
            raise
        except Exception as e:
            self._reap(process)
            raise SelectorInvocationError("Unable to write to finder input") from e
        except BaseException:
            self._reap(process)
            raise

        output = process.stdout.read()
        process.stdout.close()
        returncode = process.wait()
        logger.debug("Finder exited with code %d", returncode)

        return self._parse_output(output, returncode, opts)

    def _parse_output(self, output: str, returncode: int, opts: FinderOpts) -> Tuple[str, FinderResult]:
        lines = output.splitlines()
        query = None
        if opts.suggestion_type is SuggestionType.SINGLE_RECOMMENDATION and lines:
            query, lines = lines[0], lines[1:]

        result = FinderResult(returncode=returncode, query=query, lines=lines)

        if returncode == EXIT_NO_MATCH and query:
            return query, result

        if returncode in (EXIT_NO_MATCH, EXIT_INTERRUPTED):
            raise SelectorInvocationError(
                f"No selection made (finder exited with code {returncode})",
                returncode=returncode,
            )
        if returncode != EXIT_OK:
            raise SelectorInvocationError(
                f"Finder `{self.command}` exited with code {returncode}",
                returncode=returncode,
            )

        if opts.suggestion_type is SuggestionType.MULTIPLE_SELECTIONS:
            return "\n".join(lines), result
        if not lines and query:
            return query, result
        return (lines[0] if lines else ""), result

    def _reap(self, process: subprocess.Popen) -> None:
        """Stop a finder whose input failed, so it does not linger."""
        try:
            process.stdin.close()
        except OSError as e:
            logger.debug("Closing finder stdin failed: %s", e)
        if process.poll() is None:
            process.terminate()
        process.stdout.close()
        process.wait()
