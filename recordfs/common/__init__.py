"""Shared building blocks: record layouts, positional I/O, models and errors."""
