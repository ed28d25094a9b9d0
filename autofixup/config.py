"""
Configuration model for git-autofixup.

The CLI constructs a Config instance and passes it down into the core
orchestration logic so behavior, including diagnostic verbosity, is
adjusted without relying on global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONTEXT_LINES = 3


@dataclass
class Config:
    """
    Top-level configuration for a git-autofixup run.

    upstream is the revision before which history is considered
    immutable; only commits in upstream..HEAD receive fixups.
    """

    upstream: Optional[str] = None
    context_lines: int = DEFAULT_CONTEXT_LINES
    strictness: int = 0
    exit_code: bool = False
    verbosity: int = 0
