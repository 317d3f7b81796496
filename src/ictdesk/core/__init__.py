"""Configuration, logging and error types for the ICT desk service."""
