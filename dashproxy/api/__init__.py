"""HTTP API for dashproxy."""
