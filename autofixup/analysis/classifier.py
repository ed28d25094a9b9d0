"""
Assignment of hunks to the topic branch commit they fix up.

The functions here operate purely on hunk provenance and the set of
candidate commits; they do not interact with git. A hunk that cannot
be attributed to exactly one candidate commit is reported through a
Classification without a target, never through an exception.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Iterator, List, Optional, Tuple

from ..domain import CommitId, Classification, Strictness
from ..errors import InputError
from .provenance import HunkProvenance

# A single requirement on the hunk's target: the commit a removed line
# or an added run points at, or None with the reason it points nowhere.
_Step = Tuple[Optional[CommitId], str]


def classify(
    provenance: HunkProvenance,
    candidates: AbstractSet[CommitId],
    strictness: int,
) -> Classification:
    """
    Decide which candidate commit, if any, a hunk should fix up.

    CONTEXT accepts a hunk when exactly one candidate commit is blamed
    anywhere in its blamed range. ADJACENT requires every removed line
    and the lines adjacent to every run of added lines to agree on one
    candidate commit. SURROUNDED additionally rejects added runs with a
    neighbor outside that commit.
    """

    try:
        tier = Strictness(strictness)
    except ValueError as exc:
        raise InputError(f"invalid strictness level: {strictness}") from exc

    if not provenance.hunk.has_changes:
        return Classification(None, "hunk has no added or removed lines")

    if tier is Strictness.CONTEXT:
        return _classify_context(provenance, candidates)

    return _pin_target(_line_steps(provenance, candidates, tier))


def _classify_context(provenance: HunkProvenance, candidates: AbstractSet[CommitId]) -> Classification:
    # Every blamed line counts, including context lines that are only
    # incidentally near the change.
    blamed = [commit_id for commit_id in provenance.blamed_commits() if commit_id in candidates]
    if len(blamed) != 1:
        return Classification(None, f"{len(blamed)} topic branch commits blamed in hunk context")
    return Classification(blamed[0])


def _pin_target(steps: Iterable[_Step]) -> Classification:
    """
    Fold steps into a single target, stopping at the first disagreement.
    """

    target: Optional[CommitId] = None
    for commit_id, reason in steps:
        if commit_id is None:
            return Classification(None, reason)
        if target is None:
            target = commit_id
        elif commit_id != target:
            return Classification(None, f"multiple fixup targets: {target}, {commit_id}")

    if target is None:
        return Classification(None, "no fixup targets found")
    return Classification(target)


def _line_steps(
    provenance: HunkProvenance,
    candidates: AbstractSet[CommitId],
    tier: Strictness,
) -> Iterator[_Step]:
    lines = provenance.hunk.lines
    index = 0
    while index < len(lines):
        kind = lines[index].kind
        if kind == "removed":
            yield _removed_line_step(provenance, candidates, index)
            index += 1
        elif kind == "added":
            yield _added_run_step(provenance, candidates, index, tier)
            # Lines of one run share both neighbors.
            index = provenance.added_run_end(index)
        else:
            index += 1


def _removed_line_step(
    provenance: HunkProvenance,
    candidates: AbstractSet[CommitId],
    index: int,
) -> _Step:
    entry = provenance.entry_for(index)
    line_number = provenance.line_numbers[index]
    if entry is None:
        return None, f"no blame for removed line {line_number}"
    if entry.commit_id not in candidates:
        return None, f"removed line {line_number} predates the upstream revision"
    return entry.commit_id, ""


def _added_run_step(
    provenance: HunkProvenance,
    candidates: AbstractSet[CommitId],
    index: int,
    tier: Strictness,
) -> _Step:
    before, after = provenance.neighbors_of(index)
    adjacent: List[CommitId] = []
    for entry in (before, after):
        if entry is not None and entry.commit_id not in adjacent:
            adjacent.append(entry.commit_id)

    targets = [commit_id for commit_id in adjacent if commit_id in candidates]
    line_number = provenance.line_numbers[index]
    if len(targets) != 1:
        return None, (
            f"added lines at {line_number} are adjacent to "
            f"{len(targets)} topic branch commits"
        )

    # A run at the edge of a file is surrounded by its single neighbor,
    # and a run replacing removed lines takes the place of those lines.
    run_start = provenance.added_run_start(index)
    replaces_removed = (
        run_start > 0
        and provenance.hunk.lines[run_start - 1].kind == "removed"
        and before is not None
        and before.commit_id == targets[0]
    )
    surrounded = len(targets) == len(adjacent) or replaces_removed
    if tier >= Strictness.SURROUNDED and not surrounded:
        return None, f"added lines at {line_number} are not surrounded by {targets[0]}"

    return targets[0], ""
