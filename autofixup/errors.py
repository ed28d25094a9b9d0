"""
Custom exception types used across git-autofixup.

Every fatal condition derives from AutofixupError so the CLI can report
it as a single message. A hunk without a determinable fixup target is
not an error and has no exception type here.
"""

from __future__ import annotations


class AutofixupError(Exception):
    """Base class for all git-autofixup specific errors."""


class GitError(AutofixupError):
    """Raised when git operations fail."""


class ParseError(AutofixupError):
    """Raised when diff, blame or log output cannot be interpreted."""


class AliasError(AutofixupError):
    """Raised when a fixup!/squash! commit cannot be mapped to one target."""


class InputError(AutofixupError):
    """Raised for invalid options or an unusable upstream revision."""


class PreconditionError(AutofixupError):
    """Raised when the repository is not in a state this run can handle."""
