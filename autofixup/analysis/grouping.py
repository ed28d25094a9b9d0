"""
Grouping of classified hunks into per-commit fixups.

The functions here operate purely on the domain models and do not
interact with git.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..domain import AssignmentOutcome, CommitId, Hunk


def group_by_target(results: Iterable[Tuple[Hunk, Optional[CommitId]]]) -> Dict[CommitId, List[Hunk]]:
    """
    Bucket hunks by the commit they fix up.

    Targets appear in the order they are first seen and each bucket
    keeps the original hunk order, which keeps the rendered patch for a
    target well-formed. Hunks without a target are left out.
    """

    hunks_by_target: Dict[CommitId, List[Hunk]] = {}
    for hunk, target in results:
        if target is None:
            continue
        hunks_by_target.setdefault(target, []).append(hunk)
    return hunks_by_target


def assignment_outcome(total: int, assigned: int) -> AssignmentOutcome:
    if total == 0:
        return AssignmentOutcome.NOTHING
    if assigned == 0:
        return AssignmentOutcome.NONE
    if assigned < total:
        return AssignmentOutcome.SOME
    return AssignmentOutcome.ALL
