"""Authoritative game-session engine for the Sequence board game."""

__version__ = "1.0.0"
