"""HTTP API for the Wildcard league."""
