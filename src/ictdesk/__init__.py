"""Ticket allocation and device batch registration for the ICT desk."""

__version__ = "0.1.0"
