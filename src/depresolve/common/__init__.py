"""Shared helpers: path manipulation and logging."""
