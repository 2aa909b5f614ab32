"""Command-line interface for venuereview."""
