"""Command-line entry point and settings for plugin-kernel."""
