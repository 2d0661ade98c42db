"""Command-line interface for songcheck."""
