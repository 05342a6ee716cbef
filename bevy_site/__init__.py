"""Content generators and checkers for a Zola-based game-engine website."""

__version__ = "0.1.0"