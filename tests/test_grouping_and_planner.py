import logging

from autofixup.analysis.grouping import assignment_outcome, group_by_target
from autofixup.config import Config
from autofixup.diff_parser import parse_hunks
from autofixup.domain import AssignmentOutcome
from autofixup.errors import AliasError
from autofixup.planner import build_plan, run_autofixup

T1 = "1" * 40
T2 = "2" * 40
FIXUP = "f" * 40
UPSTREAM = "0" * 40
ROOT = "/work/repo"

# HEAD contents of f.txt, with the commit blamed for each line.
HEAD_LINES = [
    ("one", UPSTREAM),
    ("TWO", T1),
    ("three", UPSTREAM),
    ("four", UPSTREAM),
    ("five", UPSTREAM),
    ("six", UPSTREAM),
    ("seven", UPSTREAM),
    ("EIGHT", FIXUP),
    ("nine", T2),
]

WORKTREE_DIFF = """\
diff --git a/f.txt b/f.txt
--- a/f.txt
+++ b/f.txt
@@ -1,3 +1,3 @@
 one
-TWO
+TWO-edited
 three
@@ -7,3 +7,3 @@
 seven
-EIGHT
+EIGHT-edited
 nine
@@ -4,2 +4,3 @@
 four
+between
 five
"""


def _fake_blame(path, start_line, line_count, cwd=None):
    assert path == "f.txt"
    assert cwd == ROOT
    out = []
    for number in range(start_line, start_line + line_count):
        text, commit = HEAD_LINES[number - 1]
        out.append(f"{commit} {number} {number} 1\nauthor Someone\nfilename f.txt\n\t{text}\n")
    return "".join(out)


def _patch_git(monkeypatch, log, diff=WORKTREE_DIFF):
    monkeypatch.setattr("autofixup.planner.get_commit_summaries", lambda upstream: log)
    monkeypatch.setattr("autofixup.planner.get_toplevel", lambda: ROOT)
    monkeypatch.setattr("autofixup.planner.get_worktree_diff", lambda context_lines, cwd=None: diff)
    monkeypatch.setattr("autofixup.planner.blame_range", _fake_blame)


def _log():
    return (
        f"{FIXUP}:fixup! add EIGHT\n"
        f"{T2}:add nine\n"
        f"{T1}:add EIGHT and TWO\n"
    )


def test_group_by_target_keeps_encounter_order_and_drops_unassigned():
    hunks = parse_hunks(WORKTREE_DIFF)
    grouped = group_by_target(
        [(hunks[0], T2), (hunks[1], None), (hunks[2], T1), (hunks[1], T2)]
    )
    assert list(grouped) == [T2, T1]
    assert grouped[T2] == [hunks[0], hunks[1]]
    assert grouped[T1] == [hunks[2]]


def test_assignment_outcome():
    assert assignment_outcome(0, 0) is AssignmentOutcome.NOTHING
    assert assignment_outcome(3, 0) is AssignmentOutcome.NONE
    assert assignment_outcome(3, 2) is AssignmentOutcome.SOME
    assert assignment_outcome(3, 3) is AssignmentOutcome.ALL


def test_build_plan_attributes_fixup_aliases_to_their_target(monkeypatch):
    _patch_git(monkeypatch, _log())
    plan = build_plan(Config(upstream="main", strictness=1))

    assert len(plan.hunks) == 3
    # Hunk 2 removes a line blamed on the fixup commit, which resolves to
    # T1, but its added line also borders the T2 line after it.
    assert list(plan.hunks_by_target) == [T1]
    assert plan.hunks_by_target[T1] == [plan.hunks[0]]
    assert plan.assigned_count == 1


def test_build_plan_context_tier(monkeypatch):
    _patch_git(monkeypatch, _log())
    plan = build_plan(Config(upstream="main", strictness=0))

    # Hunk 1 only sees T1; hunk 2 sees T1 (via the alias) and T2; hunk 3
    # sees upstream lines only.
    assert plan.hunks_by_target == {T1: [plan.hunks[0]]}


def test_build_plan_aborts_on_alias_errors_before_blaming(monkeypatch):
    log = f"{FIXUP}:fixup! fixup! add EIGHT\n{T1}:add EIGHT and TWO\n"
    _patch_git(monkeypatch, log)

    def fail_blame(*args, **kwargs):
        raise AssertionError("blame must not run after a fatal alias error")

    monkeypatch.setattr("autofixup.planner.blame_range", fail_blame)

    try:
        build_plan(Config(upstream="main"))
    except AliasError as exc:
        assert "fixup commits for fixup commits" in str(exc)
    else:
        raise AssertionError("expected AliasError to be raised")


def test_build_plan_skips_blame_for_empty_ranges(monkeypatch):
    diff = """\
--- a/f.txt
+++ b/f.txt
@@ -2,0 +3 @@
+inserted
"""
    _patch_git(monkeypatch, _log(), diff=diff)

    def fail_blame(*args, **kwargs):
        raise AssertionError("zero-length ranges must not be blamed")

    monkeypatch.setattr("autofixup.planner.blame_range", fail_blame)

    plan = build_plan(Config(upstream="main", strictness=1))
    assert len(plan.hunks) == 1
    assert plan.hunks_by_target == {}


def test_build_plan_logs_blamediff_when_very_verbose(monkeypatch, caplog):
    _patch_git(monkeypatch, _log())
    with caplog.at_level(logging.DEBUG, logger="autofixup"):
        build_plan(Config(upstream="main", strictness=2, verbosity=2))

    assert "hunk blamediff: f.txt, @@ -1,3 +1,3 @@" in caplog.text
    assert "No fixup target for f.txt, @@ -4,2 +4,3 @@" in caplog.text


def test_run_autofixup_validates_builds_and_applies(monkeypatch):
    calls = []
    monkeypatch.setattr("autofixup.planner.validate_repository", lambda config: calls.append("preflight"))
    monkeypatch.setattr("autofixup.planner.apply_plan", lambda plan: calls.append(("apply", list(plan.hunks_by_target))))
    _patch_git(monkeypatch, _log())

    outcome = run_autofixup(Config(upstream="main", strictness=1))

    assert outcome is AssignmentOutcome.SOME
    assert calls == ["preflight", ("apply", [T1])]


def test_build_plan_reads_diff_and_blame_from_the_working_tree_root(monkeypatch):
    _patch_git(monkeypatch, _log())
    seen = []

    def fake_diff(context_lines, cwd=None):
        seen.append((context_lines, cwd))
        return WORKTREE_DIFF

    monkeypatch.setattr("autofixup.planner.get_worktree_diff", fake_diff)

    plan = build_plan(Config(upstream="main", context_lines=1, strictness=1))

    assert seen == [(1, ROOT)]
    assert plan.root == ROOT
