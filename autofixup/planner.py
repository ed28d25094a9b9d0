"""
High-level orchestration for git-autofixup.

The planner is responsible for:
  - obtaining the working tree diff and topic branch log from git,
  - parsing them into hunks, candidate commits and fixup aliases,
  - blaming the HEAD lines each hunk touches,
  - classifying every hunk under the configured strictness, and
  - grouping the accepted hunks by the commit they fix up.

Every fatal error is raised while building the plan, before any fixup
commit is created.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, List, Mapping, Optional, Sequence, Tuple

from .analysis.classifier import classify
from .analysis.grouping import assignment_outcome, group_by_target
from .analysis.provenance import HunkProvenance, map_provenance, render_blamediff
from .apply import apply_plan
from .blame_parser import parse_blame_porcelain
from .config import Config
from .diff_parser import parse_hunks
from .domain import AssignmentOutcome, BlameEntry, CommitId, FixupPlan, Hunk
from .git_adapter import blame_range, get_commit_summaries, get_toplevel, get_worktree_diff
from .history import candidate_set, parse_commit_summaries, resolve_aliases
from .preflight import validate_config, validate_repository

LOG = logging.getLogger(__name__)


def build_plan(config: Config) -> FixupPlan:
    """
    Build the fixup plan for the current working tree changes.
    """

    summaries = parse_commit_summaries(get_commit_summaries(config.upstream or ""))
    candidates = candidate_set(summaries)
    aliases = resolve_aliases(summaries)
    LOG.info(
        "Found %d topic branch commits (%d fixup aliases) since %s",
        len(candidates),
        len(aliases),
        config.upstream,
    )

    # Diff paths are relative to the root; blame resolves them against cwd.
    root = get_toplevel()
    hunks = parse_hunks(get_worktree_diff(config.context_lines, cwd=root))
    LOG.info("Found %d hunks in the working tree", len(hunks))

    provenances = [map_provenance(hunk, _blame_hunk(hunk, root), aliases) for hunk in hunks]
    return FixupPlan(
        hunks=hunks,
        hunks_by_target=assign_hunks(provenances, candidates, config),
        root=root,
    )


def assign_hunks(
    provenances: Sequence[HunkProvenance],
    candidates: AbstractSet[CommitId],
    config: Config,
) -> Dict[CommitId, List[Hunk]]:
    """
    Classify each hunk and group the accepted ones by target commit.
    """

    results: List[Tuple[Hunk, Optional[CommitId]]] = []
    for provenance in provenances:
        hunk = provenance.hunk
        if config.verbosity > 1:
            LOG.debug("%s", render_blamediff(provenance, candidates))

        classification = classify(provenance, candidates, config.strictness)
        if classification.accepted:
            LOG.debug("Assigning %s to %s", hunk.describe(), classification.target)
        elif config.verbosity > 0:
            LOG.info("No fixup target for %s: %s", hunk.describe(), classification.reason)
        results.append((hunk, classification.target))

    return group_by_target(results)


def _blame_hunk(hunk: Hunk, root: Optional[str]) -> Mapping[int, BlameEntry]:
    # A pure insertion with no context covers no HEAD lines.
    if hunk.line_count == 0:
        return {}
    return parse_blame_porcelain(blame_range(hunk.file, hunk.start_line, hunk.line_count, cwd=root))


def run_autofixup(config: Config) -> AssignmentOutcome:
    """
    Entry point for the main CLI command.

    Validates the configuration and repository, builds a plan, creates
    one fixup commit per target and reports how many hunks were
    assigned.
    """

    LOG.debug("Starting git-autofixup with config: %s", config)

    validate_config(config)
    validate_repository(config)

    plan = build_plan(config)
    apply_plan(plan)

    outcome = assignment_outcome(len(plan.hunks), plan.assigned_count)
    LOG.info(
        "Assigned %d of %d hunks to %d commits",
        plan.assigned_count,
        len(plan.hunks),
        len(plan.hunks_by_target),
    )
    return outcome
