"""Dodge: falling-block arcade game with a deterministic simulation core."""

__version__ = "0.1.0"
