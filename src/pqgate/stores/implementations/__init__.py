"""Persisted query store implementations."""
