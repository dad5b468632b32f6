"""Tamapet: a small virtual pet that hatches, lives, decays and dies."""

__version__ = "2.0.0"
