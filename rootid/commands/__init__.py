"""Command implementations for the rootid CLI."""
