"""Shared helpers: time handling and fuzzy matching."""
