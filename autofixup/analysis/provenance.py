"""
Line provenance for diff hunks.

Maps every line of a hunk onto the blame of the HEAD revision. Context
and removed lines exist in HEAD and have a blame entry of their own;
added lines do not, and are instead described by the HEAD lines just
before and after the run of added lines they belong to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Mapping, Optional, Tuple

from ..domain import BlameEntry, CommitId, Hunk

_BLAMEDIFF_FORMAT = "{commit:<8.8}|{line:>4.4}|{head:<30.30}|{working:<30.30}"


def head_line_numbers(hunk: Hunk) -> Tuple[int, ...]:
    """
    Return the HEAD line number associated with each diff line.

    The counter starts at the hunk's start line and advances after
    context and removed lines only. An added line therefore shares its
    number with the HEAD line that follows it.
    """

    numbers: List[int] = []
    current = hunk.start_line
    for line in hunk.lines:
        numbers.append(current)
        if line.kind != "added":
            current += 1
    return tuple(numbers)


@dataclass(frozen=True)
class HunkProvenance:
    """
    Blame entries for one hunk, after fixup alias substitution.
    """

    hunk: Hunk
    line_numbers: Tuple[int, ...]
    blame: Mapping[int, BlameEntry]

    def entry_for(self, index: int) -> Optional[BlameEntry]:
        """
        Blame entry for a context or removed line.
        """

        return self.blame.get(self.line_numbers[index])

    def added_run_start(self, index: int) -> int:
        start = index
        while start > 0 and self.hunk.lines[start - 1].kind == "added":
            start -= 1
        return start

    def added_run_end(self, index: int) -> int:
        """
        Index just past the run of added lines containing index.
        """

        end = index
        while end < len(self.hunk.lines) and self.hunk.lines[end].kind == "added":
            end += 1
        return end

    def neighbors_of(self, index: int) -> Tuple[Optional[BlameEntry], Optional[BlameEntry]]:
        """
        Blame entries of the HEAD lines before and after an added run.

        The line before is absent when the run opens the hunk; the line
        after is absent when the run reaches past the blamed range.
        """

        line_number = self.line_numbers[index]
        before = None
        if self.added_run_start(index) > 0:
            before = self.blame.get(line_number - 1)
        after = self.blame.get(line_number)
        return before, after

    def blamed_commits(self) -> List[CommitId]:
        """
        Distinct commits blamed anywhere in the hunk, in line order.
        """

        seen: List[CommitId] = []
        for line_number in sorted(self.blame):
            commit_id = self.blame[line_number].commit_id
            if commit_id not in seen:
                seen.append(commit_id)
        return seen


def map_provenance(
    hunk: Hunk,
    blame: Mapping[int, BlameEntry],
    aliases: Mapping[CommitId, CommitId],
) -> HunkProvenance:
    """
    Build the provenance of a hunk from blame data for its file.

    Entries outside the hunk's HEAD range are ignored, and commits that
    are fixups of another topic commit are replaced by that commit.
    """

    first = hunk.start_line
    last = hunk.start_line + hunk.line_count
    restricted: Dict[int, BlameEntry] = {}
    for line_number, entry in blame.items():
        if not first <= line_number < last:
            continue
        commit_id = aliases.get(entry.commit_id, entry.commit_id)
        restricted[line_number] = BlameEntry(
            line_number=line_number,
            commit_id=commit_id,
            source_text=entry.source_text,
        )

    return HunkProvenance(
        hunk=hunk,
        line_numbers=head_line_numbers(hunk),
        blame=restricted,
    )


def render_blamediff(provenance: HunkProvenance, candidates: AbstractSet[CommitId]) -> str:
    """
    Render a hunk side by side with the blame of the lines it touches.

    Commits from before the upstream revision are shown as "^"; added
    lines have neither a commit nor a HEAD line.
    """

    hunk = provenance.hunk
    rows = [f"hunk blamediff: {hunk.describe()}"]
    for index, line in enumerate(hunk.lines):
        working = (line.marker + line.text).rstrip()
        if line.kind == "added":
            rows.append(_BLAMEDIFF_FORMAT.format(commit="", line="", head="", working=working))
            continue

        entry = provenance.entry_for(index)
        commit = ""
        head = ""
        if entry is not None:
            commit = entry.commit_id if entry.commit_id in candidates else "^"
            head = entry.source_text.rstrip()
        rows.append(
            _BLAMEDIFF_FORMAT.format(
                commit=commit,
                line=str(provenance.line_numbers[index]),
                head=head,
                working=working,
            )
        )
    return "\n".join(rows)
