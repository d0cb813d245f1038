"""Shared helpers: logging, HTTP and orb file persistence."""
