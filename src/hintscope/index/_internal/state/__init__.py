"""Coordinator-owned per-file state."""
