"""Helpers shared by the fountain package, the display layer, and the CLI."""
