"""
Runtime checks for git-autofixup runs.

These checks run before any diff is parsed so invalid options and
unsupported repository states fail fast with actionable errors.
"""

from __future__ import annotations

from typing import List

from .config import Config
from .domain import Strictness
from .errors import GitError, InputError, PreconditionError
from .git_adapter import get_status, resolve_commit


def validate_config(config: Config) -> None:
    """
    Reject option values the engine cannot work with.
    """

    if not config.upstream:
        raise InputError("no upstream revision given")

    if config.context_lines < 0:
        raise InputError(f"invalid number of context lines: {config.context_lines}")

    valid_levels = [int(level) for level in Strictness]
    if config.strictness not in valid_levels:
        raise InputError(
            f"invalid strictness level: {config.strictness} "
            f"(expected one of {', '.join(str(level) for level in valid_levels)})"
        )


def validate_repository(config: Config) -> None:
    """
    Ensure the upstream revision exists and nothing is staged.

    Fixup commits are built by staging selected hunks, so pre-existing
    staged changes would leak into them.
    """

    try:
        resolve_commit(config.upstream or "")
    except GitError as exc:
        raise InputError(f"bad revision: {config.upstream}") from exc

    staged = _staged_paths(get_status())
    if staged:
        raise PreconditionError(
            "there are staged changes; clean up the index and try again "
            f"(staged: {', '.join(staged)})"
        )


def _staged_paths(status: str) -> List[str]:
    paths: List[str] = []
    for line in status.splitlines():
        if not line:
            continue
        # The first column describes the index; untracked and ignored
        # entries use "?" and "!".
        if line[0] not in (" ", "?", "!"):
            paths.append(line[3:])
    return paths
