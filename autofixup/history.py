"""
Topic branch history for git-autofixup.

Parses the commit summaries of the upstream..HEAD range and resolves
existing fixup!/squash! commits to the commit they amend, so lines
blamed on such a commit are attributed to its target instead.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, FrozenSet, List, Optional, Sequence

from .domain import AliasResolution, CommitId, CommitSummary
from .errors import AliasError, ParseError

LOG = logging.getLogger(__name__)

_ALIAS_SUBJECT_RE = re.compile(r"^(?:fixup|squash)! (?P<prefix>.*)$", re.DOTALL)


def parse_commit_summaries(raw_log: str) -> List[CommitSummary]:
    """
    Parse `git log --format=%H:%s` output into commit summaries.

    Each non-empty line is split at the first colon; subjects may
    contain further colons.
    """

    summaries: List[CommitSummary] = []
    for line in raw_log.split("\n"):
        if not line.strip():
            continue

        commit_id, sep, subject = line.partition(":")
        commit_id = commit_id.strip()
        if not sep or not commit_id:
            raise ParseError(f"malformed commit summary line: {line!r}")

        summaries.append(CommitSummary(id=commit_id, subject=subject))

    return summaries


def candidate_set(summaries: Sequence[CommitSummary]) -> FrozenSet[CommitId]:
    """
    Return the ids of commits eligible to receive fixups.
    """

    return frozenset(summary.id for summary in summaries)


def alias_prefix(subject: str) -> Optional[str]:
    """
    Return the subject a fixup!/squash! commit refers to, or None.
    """

    match = _ALIAS_SUBJECT_RE.match(subject)
    if not match:
        return None
    return match.group("prefix")


def resolve_alias(summary: CommitSummary, summaries: Sequence[CommitSummary]) -> AliasResolution:
    """
    Find the commits an aliasing commit may refer to.

    All other commits whose subject starts with the referenced prefix
    are collected first; the caller decides what the count means via
    the returned resolution's status.
    """

    prefix = alias_prefix(summary.subject)
    if prefix is None:
        raise ValueError(f"commit {summary.id} is not a fixup!/squash! commit")

    matches = tuple(
        other.id
        for other in summaries
        if other.id != summary.id and other.subject.startswith(prefix)
    )
    return AliasResolution(alias=summary.id, prefix=prefix, matches=matches)


def resolve_aliases(summaries: Sequence[CommitSummary]) -> Dict[CommitId, CommitId]:
    """
    Build the map from fixup!/squash! commits to the commits they amend.

    Raises AliasError for fixups of fixups and for references that match
    no commit or more than one commit in the range.
    """

    aliases: Dict[CommitId, CommitId] = {}

    for summary in summaries:
        prefix = alias_prefix(summary.subject)
        if prefix is None:
            continue

        if alias_prefix(prefix) is not None:
            raise AliasError(f"fixup commits for fixup commits aren't supported: {summary.id}")

        resolution = resolve_alias(summary, summaries)
        if resolution.status == "ambiguous":
            raise AliasError(
                "ambiguous fixup commit target: multiple commit summaries start with: "
                f"{prefix} ({', '.join(resolution.matches)})"
            )
        if resolution.status == "missing":
            raise AliasError(f"no fixup target for {summary.id}: no commit summary starts with: {prefix}")

        LOG.debug("Treating %s as an alias of %s", summary.id, resolution.target)
        aliases[summary.id] = resolution.matches[0]

    return aliases
