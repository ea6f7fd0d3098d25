"""User-facing output helpers."""
