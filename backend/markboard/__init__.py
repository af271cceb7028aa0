"""Ephemeral map marks with live updates and Web Push."""

__version__ = "0.1.0"
