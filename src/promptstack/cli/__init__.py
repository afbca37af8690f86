"""Command-line interface for promptstack."""
