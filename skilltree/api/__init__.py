"""HTTP API for browser front ends."""
