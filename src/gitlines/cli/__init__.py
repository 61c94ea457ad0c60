"""Command line interface for gitlines."""
