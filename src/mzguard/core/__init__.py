"""Shared infrastructure: configuration, logging, progress."""
