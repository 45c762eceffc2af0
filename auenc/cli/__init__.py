"""Command-line interface for auenc."""
