"""
Git integration for git-autofixup.

This module is the only place that runs the git CLI: it obtains the
working tree diff, the topic branch log and blame output as text, and
stages patches and creates fixup commits. Interpreting that text is
left to the parser modules.

Git output is read as bytes and decoded with surrogateescape, so line
endings and non-UTF-8 content survive the round trip back into
`git apply`.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

from .errors import GitError

LOG = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode(_ENCODING, _ERRORS)


def _run_git(
    args: list[str],
    cwd: Optional[str] = None,
    input_text: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    All git invocations go through this helper so that error handling
    and logging are centralized. stdout and stderr are returned as
    losslessly decoded text with no newline translation.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=True,
            input=None if input_text is None else input_text.encode(_ENCODING, _ERRORS),
        )
    except OSError as exc:  # noqa: BLE001
        raise GitError(f"failed to execute git: {exc}") from exc

    stdout = _decode(completed.stdout)
    stderr = _decode(completed.stderr)
    if completed.returncode != 0:
        LOG.debug("git stderr: %s", stderr)
        message = f"git command failed: {' '.join(cmd)}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        raise GitError(message)

    return subprocess.CompletedProcess(completed.args, completed.returncode, stdout, stderr)


def resolve_commit(revision: str) -> str:
    """
    Return the full id of the commit a revision names.
    """

    return _run_git(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"]).stdout.strip()


def get_toplevel() -> str:
    """
    Return the absolute path of the working tree root.
    """

    return _run_git(["rev-parse", "--show-toplevel"]).stdout.rstrip("\n")


def get_status() -> str:
    """
    Return `git status --porcelain` output.
    """

    return _run_git(["status", "--porcelain"]).stdout


def get_worktree_diff(context_lines: int, cwd: Optional[str] = None) -> str:
    """
    Return the unified diff of unstaged working tree changes.

    Paths carry explicit a/ and b/ prefixes whatever diff.noprefix or
    diff.mnemonicPrefix say.
    """

    args = [
        "diff",
        "--no-color",
        "--no-ext-diff",
        "--ignore-submodules",
        "--src-prefix=a/",
        "--dst-prefix=b/",
        f"-U{context_lines}",
    ]
    return _run_git(args, cwd=cwd).stdout


def get_commit_summaries(upstream: str) -> str:
    """
    Return one `<id>:<subject>` line per non-merge commit in upstream..HEAD.
    """

    return _run_git(["log", "--no-merges", "--format=%H:%s", f"{upstream}.."]).stdout


def blame_range(path: str, start_line: int, line_count: int, cwd: Optional[str] = None) -> str:
    """
    Return porcelain blame of HEAD:path for line_count lines from start_line.

    path is relative to cwd, which should be the working tree root for
    paths taken from the diff.
    """

    args = ["blame", "--porcelain", "-L", f"{start_line},+{line_count}", "HEAD", "--", path]
    return _run_git(args, cwd=cwd).stdout


def apply_patch(
    patch: str,
    index_only: bool = False,
    unidiff_zero: bool = False,
    cwd: Optional[str] = None,
) -> None:
    """
    Apply a unified diff patch to the current repository.

    When index_only is True, the patch is applied to the index without
    touching the working tree. unidiff_zero allows hunks produced with
    no context lines.
    """

    args = ["apply"]
    if unidiff_zero:
        args.append("--unidiff-zero")
    if index_only:
        # Update the index only; leave the working tree unchanged.
        args.append("--cached")
    args.append("-")

    # Feed the patch via stdin. We rely on git to validate the patch and
    # will raise GitError if it fails.
    _run_git(args, cwd=cwd, input_text=patch)


def create_fixup_commit(commit_id: str) -> None:
    """
    Commit the index as a fixup of commit_id.
    """

    _run_git(["commit", f"--fixup={commit_id}"])


def reset_index() -> None:
    """
    Reset the index to HEAD, keeping working tree changes.
    """

    _run_git(["reset", "-q"])
