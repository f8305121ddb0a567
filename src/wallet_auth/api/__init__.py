"""HTTP API for the wallet auth service."""
