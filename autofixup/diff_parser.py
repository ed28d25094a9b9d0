"""
Unified diff parsing for git-autofixup.

The parser converts the raw output of `git diff` for the working tree
into Hunk objects defined in autofixup.domain, and renders selected
hunks back into a minimal patch that `git apply --cached` accepts.

Parsing is a forward-only state machine over the diff lines. Hunks are
never merged or reordered, and hunks that create or delete a file are
dropped because there is no prior history to attribute them to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterable, List, Optional

from .domain import NO_NEWLINE_MARKER, DiffLine, Hunk, LineKind
from .errors import ParseError

LOG = logging.getLogger(__name__)

_HUNK_HEADER_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))?"
    r" \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))?"
    r" @@"
)

_KINDS = {" ": "context", "+": "added", "-": "removed"}


class _State(Enum):
    AWAITING_FILE_HEADER = auto()
    AWAITING_HUNK_HEADER = auto()
    IN_HUNK_BODY = auto()


@dataclass
class _OpenHunk:
    """
    A hunk whose body is still being read.

    old_remaining and new_remaining count down the line totals declared
    in the header.
    """

    file_old: str
    file_new: str
    start_line: int
    line_count: int
    header: str
    old_remaining: int
    new_remaining: int
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def accepts(self, line: str) -> bool:
        if line.startswith("\\"):
            return True
        if not line or line[0] not in _KINDS:
            return False
        # Without a "diff --git" separator the next file header looks
        # like a removed line; the declared counts tell them apart.
        if line.startswith("--- ") and self.exhausted:
            return False
        return True

    def consume(self, line: str) -> None:
        if line.startswith("\\"):
            if not self.lines:
                raise ParseError(f"stray {NO_NEWLINE_MARKER!r} marker in hunk {self.header!r}")
            last = self.lines.pop()
            self.lines.append(DiffLine(kind=last.kind, text=last.text, no_newline_at_eof=True))
            return

        kind: LineKind = _KINDS[line[0]]  # type: ignore[assignment]
        if kind != "added":
            self.old_remaining -= 1
        if kind != "removed":
            self.new_remaining -= 1
        self.lines.append(DiffLine(kind=kind, text=line[1:]))


def parse_hunks(raw_diff: str) -> List[Hunk]:
    """
    Parse unified diff text into an ordered list of hunks.

    Hunks whose pre-image and post-image paths differ are skipped.
    Raises ParseError for hunk headers that cannot be interpreted.
    """

    # Only "\n" ends a diff line; body text may hold form feeds or "\r".
    lines = raw_diff.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    hunks: List[Hunk] = []

    state = _State.AWAITING_FILE_HEADER
    file_old: Optional[str] = None
    file_new: Optional[str] = None
    current: Optional[_OpenHunk] = None

    i = 0
    while i < len(lines):
        line = lines[i]

        if state is _State.IN_HUNK_BODY:
            assert current is not None
            if current.accepts(line):
                current.consume(line)
                i += 1
                continue

            _close_hunk(current, hunks)
            current = None
            # Re-examine this line as a potential header.
            state = _State.AWAITING_HUNK_HEADER
            continue

        if line.startswith("--- "):
            file_old = _strip_path_prefix(line[4:])
            file_new = None
            state = _State.AWAITING_FILE_HEADER
        elif line.startswith("+++ "):
            file_new = _strip_path_prefix(line[4:])
            state = _State.AWAITING_HUNK_HEADER
        elif line.startswith("@@"):
            if state is not _State.AWAITING_HUNK_HEADER or file_old is None or file_new is None:
                raise ParseError(f"hunk header without preceding file headers: {line!r}")
            current = _open_hunk(line, file_old, file_new)
            state = _State.IN_HUNK_BODY

        i += 1

    if current is not None:
        _close_hunk(current, hunks)

    return hunks


def _open_hunk(header: str, file_old: str, file_new: str) -> _OpenHunk:
    match = _HUNK_HEADER_RE.match(header)
    if not match:
        raise ParseError(f"malformed hunk header: {header!r}")

    old_count = _parse_count(match.group("old_count"))
    new_count = _parse_count(match.group("new_count"))
    return _OpenHunk(
        file_old=file_old,
        file_new=file_new,
        start_line=int(match.group("old_start")),
        line_count=old_count,
        header=header,
        old_remaining=old_count,
        new_remaining=new_count,
    )


def _parse_count(raw: Optional[str]) -> int:
    # A count omitted from the header means a single line.
    return 1 if raw is None else int(raw)


def _close_hunk(hunk: _OpenHunk, hunks: List[Hunk]) -> None:
    if not hunk.lines:
        raise ParseError(f"hunk has no body lines: {hunk.header!r}")

    if hunk.file_old != hunk.file_new:
        LOG.debug(
            "Ignoring hunk for created or deleted file (%s -> %s): %s",
            hunk.file_old,
            hunk.file_new,
            hunk.header,
        )
        return

    hunks.append(
        Hunk(
            file=hunk.file_old,
            start_line=hunk.start_line,
            line_count=hunk.line_count,
            header=hunk.header,
            lines=tuple(hunk.lines),
        )
    )


def _strip_path_prefix(path: str) -> str:
    """
    Strip a single-character source prefix such as "a/" or "b/".

    "/dev/null" is left untouched so creations and deletions keep
    mismatching paths.
    """

    if len(path) > 2 and path[1] == "/" and path[0] != "/":
        return path[2:]
    return path


def render_fixup_patch(hunks: Iterable[Hunk]) -> str:
    """
    Render hunks into a minimal unified diff for `git apply --cached`.

    File headers use the same path on both sides and are emitted again
    whenever the file changes between consecutive hunks. Hunk headers
    and bodies are reproduced verbatim.
    """

    output: List[str] = []
    previous_file: Optional[str] = None

    for hunk in hunks:
        if hunk.file != previous_file:
            output.append(f"--- a/{hunk.file}\n")
            output.append(f"+++ a/{hunk.file}\n")
            previous_file = hunk.file

        output.append(hunk.header + "\n")
        output.extend(line.render() for line in hunk.lines)

    return "".join(output)
