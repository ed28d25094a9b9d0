"""
Core domain models for git-autofixup.

These dataclasses describe diff hunks, commit summaries, blame entries
and the resulting fixup plan. They intentionally avoid any direct git
dependencies so they can be reused by different parts of the system.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Literal, Optional, Tuple

CommitId = str

LineKind = Literal["context", "added", "removed"]

_MARKERS = {"context": " ", "added": "+", "removed": "-"}

NO_NEWLINE_MARKER = "\\ No newline at end of file"


@dataclass(frozen=True)
class DiffLine:
    """
    A single line within a diff hunk.

    text excludes the leading marker character and the line terminator.
    no_newline_at_eof is set when git followed the line with a
    "\\ No newline at end of file" marker.
    """

    kind: LineKind
    text: str
    no_newline_at_eof: bool = False

    @property
    def marker(self) -> str:
        return _MARKERS[self.kind]

    def render(self) -> str:
        rendered = f"{self.marker}{self.text}\n"
        if self.no_newline_at_eof:
            rendered += NO_NEWLINE_MARKER + "\n"
        return rendered


@dataclass(frozen=True)
class Hunk:
    """
    A contiguous block of changes in a single file.

    start_line and line_count describe the pre-image range, which is
    the range of HEAD that blame is asked about.
    """

    file: str
    start_line: int
    line_count: int
    header: str
    lines: Tuple[DiffLine, ...]

    @property
    def has_changes(self) -> bool:
        return any(line.kind != "context" for line in self.lines)

    def describe(self) -> str:
        return f"{self.file}, {self.header}"


@dataclass(frozen=True)
class CommitSummary:
    """
    One commit of the upstream..HEAD range as reported by git log.
    """

    id: CommitId
    subject: str


@dataclass(frozen=True)
class BlameEntry:
    """
    Provenance of one line of the HEAD revision of a file.
    """

    line_number: int
    commit_id: CommitId
    source_text: str


AliasStatus = Literal["resolved", "ambiguous", "missing"]


@dataclass(frozen=True)
class AliasResolution:
    """
    Outcome of looking up the commit a fixup!/squash! commit amends.

    matches holds every other commit whose subject starts with prefix;
    the status is derived from how many there are.
    """

    alias: CommitId
    prefix: str
    matches: Tuple[CommitId, ...]

    @property
    def status(self) -> AliasStatus:
        if len(self.matches) == 1:
            return "resolved"
        if not self.matches:
            return "missing"
        return "ambiguous"

    @property
    def target(self) -> Optional[CommitId]:
        return self.matches[0] if self.status == "resolved" else None


class Strictness(IntEnum):
    """
    Hunk assignment policies, from most to least permissive.
    """

    CONTEXT = 0
    ADJACENT = 1
    SURROUNDED = 2


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying one hunk: a target commit or the reason there
    is none.
    """

    target: Optional[CommitId]
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.target is not None


class AssignmentOutcome(Enum):
    """
    How many of the eligible hunks were assigned to a fixup target.
    """

    ALL = "all"
    SOME = "some"
    NONE = "none"
    NOTHING = "nothing"


@dataclass
class FixupPlan:
    """
    The full plan: every parsed hunk and the hunks assigned per target.

    hunks_by_target preserves first-seen order of targets and the
    original hunk order within each target.
    root is the working tree root that hunk paths are relative to.
    """

    hunks: List[Hunk] = field(default_factory=list)
    hunks_by_target: Dict[CommitId, List[Hunk]] = field(default_factory=dict)
    root: Optional[str] = None

    @property
    def assigned_count(self) -> int:
        return sum(len(hunks) for hunks in self.hunks_by_target.values())
