"""Rank-to-rent microsite build workflow client."""

__version__ = "0.1.0"
