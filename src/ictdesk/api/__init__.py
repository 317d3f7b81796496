"""HTTP API for the ICT desk service."""
