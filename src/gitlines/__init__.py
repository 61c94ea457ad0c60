"""gitlines - structured line model for git diffs and conflicted files."""

__version__ = "0.1.0"
