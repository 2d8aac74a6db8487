"""clipkeep - in-memory clipboard history."""

__version__ = "0.1.0"
