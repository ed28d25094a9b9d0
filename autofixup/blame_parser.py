"""
Parsing of `git blame --porcelain` output for git-autofixup.

Each blamed line is introduced by a header naming the commit and the
line's original and final line numbers, optionally followed by
metadata, and then the source line itself prefixed with a tab. A
source line that directly follows another one continues the same
commit at the next final line number.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from .domain import BlameEntry
from .errors import ParseError

_COMMIT_ID_RE = re.compile(r"^(?:[0-9a-f]{64}|[0-9a-f]{40})\b")

_BLAME_HEADER_RE = re.compile(
    r"^(?P<commit>[0-9a-f]{64}|[0-9a-f]{40})"
    r" (?P<orig_line>\d+) (?P<final_line>\d+)(?: (?P<count>\d+))?$"
)


def parse_blame_porcelain(raw_blame: str) -> Dict[int, BlameEntry]:
    """
    Parse porcelain blame output into entries keyed by final line number.
    """

    entries: Dict[int, BlameEntry] = {}
    commit: Optional[str] = None
    next_line: Optional[int] = None

    for line in raw_blame.split("\n"):
        if line.startswith("\t"):
            if commit is None or next_line is None:
                raise ParseError(f"blame source line without a commit header: {line!r}")
            entries[next_line] = BlameEntry(
                line_number=next_line,
                commit_id=commit,
                source_text=line[1:],
            )
            next_line += 1
            continue

        if not _COMMIT_ID_RE.match(line):
            # Metadata such as author, summary or filename.
            continue

        match = _BLAME_HEADER_RE.match(line)
        if not match:
            raise ParseError(f"malformed blame header: {line!r}")
        commit = match.group("commit")
        next_line = int(match.group("final_line"))

    return entries
