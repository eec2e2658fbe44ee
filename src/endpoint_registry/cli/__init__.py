"""Command-line interface for the endpoint registry."""
