"""HTTP API for pqgate."""
