from autofixup.analysis.provenance import head_line_numbers, map_provenance, render_blamediff
from autofixup.diff_parser import parse_hunks
from autofixup.domain import BlameEntry

T1 = "1" * 40
T2 = "2" * 40
FIXUP = "f" * 40
UPSTREAM = "0" * 40


def _hunk(header, body):
    (hunk,) = parse_hunks(f"--- a/f.txt\n+++ b/f.txt\n{header}\n{body}")
    return hunk


def _blame(commits_by_line):
    return {
        line: BlameEntry(line_number=line, commit_id=commit, source_text=f"line {line}")
        for line, commit in commits_by_line.items()
    }


def test_head_line_numbers_skip_added_lines():
    hunk = _hunk("@@ -4,4 +4,5 @@", " a\n-b\n+B\n+C\n c\n d\n")
    assert head_line_numbers(hunk) == (4, 5, 6, 6, 6, 7)


def test_map_provenance_substitutes_aliases():
    hunk = _hunk("@@ -1,2 +1,2 @@", " one\n-two\n+TWO\n")
    provenance = map_provenance(hunk, _blame({1: UPSTREAM, 2: FIXUP}), {FIXUP: T1})
    assert provenance.entry_for(1).commit_id == T1
    assert provenance.entry_for(0).commit_id == UPSTREAM


def test_map_provenance_ignores_lines_outside_the_hunk():
    hunk = _hunk("@@ -2,2 +2,2 @@", " two\n-three\n+THREE\n")
    provenance = map_provenance(hunk, _blame({1: T2, 2: T1, 3: T1, 4: T2}), {})
    assert sorted(provenance.blame) == [2, 3]
    assert provenance.blamed_commits() == [T1]


def test_neighbors_of_added_run():
    hunk = _hunk("@@ -1,3 +1,5 @@", " a\n+x\n+y\n b\n c\n")
    provenance = map_provenance(hunk, _blame({1: T1, 2: T2, 3: T2}), {})
    before, after = provenance.neighbors_of(1)
    assert (before.line_number, after.line_number) == (1, 2)
    # Every line of the run shares the same neighbors.
    assert provenance.neighbors_of(2) == (before, after)
    assert provenance.added_run_end(1) == 3


def test_neighbors_of_run_opening_the_hunk_has_no_line_before():
    hunk = _hunk("@@ -1,2 +1,3 @@", "+first\n a\n b\n")
    provenance = map_provenance(hunk, _blame({1: T1, 2: T1}), {})
    before, after = provenance.neighbors_of(0)
    assert before is None
    assert after.commit_id == T1


def test_neighbors_of_run_closing_the_hunk_has_no_line_after():
    hunk = _hunk("@@ -1,2 +1,3 @@", " a\n b\n+last\n")
    provenance = map_provenance(hunk, _blame({1: T1, 2: T2}), {})
    before, after = provenance.neighbors_of(2)
    assert before.commit_id == T2
    assert after is None


def test_render_blamediff_marks_upstream_lines():
    hunk = _hunk("@@ -1,2 +1,3 @@", " a\n+x\n b\n")
    provenance = map_provenance(hunk, _blame({1: UPSTREAM, 2: T1}), {})
    rendered = render_blamediff(provenance, frozenset({T1}))
    rows = rendered.splitlines()
    assert rows[0] == "hunk blamediff: f.txt, @@ -1,2 +1,3 @@"
    assert rows[1].startswith("^       |   1|line 1")
    assert rows[2].startswith("        |    |")
    assert rows[2].rstrip().endswith("+x")
    assert rows[3].startswith("11111111|   2|line 2")
