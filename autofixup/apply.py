"""
Application of a git-autofixup plan to a git repository.

This module turns a validated plan into fixup commits. Each commit
stages its hunks on top of the index left by the previous one, so
commits are created strictly one after another in plan order.
"""

from __future__ import annotations

import logging
from typing import List

from .diff_parser import render_fixup_patch
from .domain import CommitId, FixupPlan
from .errors import GitError
from .git_adapter import apply_patch, create_fixup_commit, reset_index

LOG = logging.getLogger(__name__)


def apply_plan(plan: FixupPlan) -> None:
    """
    Create one fixup commit per target commit in the plan.

    If staging or committing fails for a target, the index is reset to
    HEAD and a GitError names the fixup commits that were already
    created along with the target that failed.
    """

    if not plan.hunks_by_target:
        LOG.info("No hunks assigned; not creating any fixup commits")
        return

    created: List[CommitId] = []
    for target, hunks in plan.hunks_by_target.items():
        LOG.info("Creating fixup commit for %s (%d hunks)", target, len(hunks))
        patch = render_fixup_patch(hunks)

        try:
            # Apply patch to the index only; the working tree already
            # contains these changes.
            apply_patch(patch, index_only=True, unidiff_zero=True, cwd=plan.root)
            create_fixup_commit(target)
        except GitError as exc:
            _reset_after_failure()
            raise GitError(_failure_message(target, created, exc)) from exc
        created.append(target)


def _reset_after_failure() -> None:
    # The original failure is reported either way.
    try:
        reset_index()
    except GitError as exc:
        LOG.warning("Could not reset the index: %s", exc)


def _failure_message(target: CommitId, created: List[CommitId], exc: GitError) -> str:
    if created:
        done = f"fixup commits already created for: {', '.join(created)}"
    else:
        done = "no fixup commits were created"
    return f"failed to create fixup commit for {target} ({done}): {exc}"
