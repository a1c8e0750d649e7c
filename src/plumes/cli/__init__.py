"""Command line interface for plumes."""
