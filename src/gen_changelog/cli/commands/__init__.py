"""Command implementations for the gen-changelog CLI."""
