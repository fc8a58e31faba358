"""HTTP API for Property Portfolio."""
