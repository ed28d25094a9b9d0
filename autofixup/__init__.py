"""
git-autofixup: create fixup commits for topic branches.
"""

__version__ = "0.1.0"
