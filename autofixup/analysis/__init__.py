"""
Analysis package for git-autofixup.

This package contains the pure assignment logic: mapping hunks onto
blame data, classifying each hunk under a strictness tier, and grouping
the accepted hunks by target commit.
"""
