"""Command-line helpers for generating sample data."""
