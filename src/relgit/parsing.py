"""Turn git's textual output into structured values."""

from __future__ import annotations

import re

from relgit.executor import RelgitError
from relgit.models import AheadBehind

_COUNT = re.compile(r"[0-9]+")


class OutputParseError(RelgitError, ValueError):
    """git produced output that does not have the expected shape."""

    def __init__(self, message: str, output: str) -> None:
        self.output = output
        super().__init__(f"{message}: {output!r}")


def parse_ahead_behind(output: str) -> AheadBehind:
    """Parse ``rev-list --left-right --count`` output.

    The left count (commits only on the upstream) is *behind*, the right
    count is *ahead*.

    Raises:
        OutputParseError: Unless the output is exactly two tab-separated
            base-10 integers.
    """
    fields = output.strip().split("\t")
    if len(fields) != 2:
        raise OutputParseError("Expected two tab-separated counts", output)
    if not all(_COUNT.fullmatch(field) for field in fields):
        raise OutputParseError("Counts are not base-10 integers", output)
    behind, ahead = (int(field) for field in fields)
    return AheadBehind(behind=behind, ahead=ahead)


def parse_path_list(output: str) -> list[str]:
    """Split newline-delimited paths, keeping git's order and dropping blanks."""
    return [line for line in output.splitlines() if line.strip()]


def parse_flag(output: str) -> bool:
    """Truthiness of the output: any non-whitespace text counts as ``True``."""
    return bool(output.strip())
