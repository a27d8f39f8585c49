"""Helpers shared across the resolver and the CLI."""
