"""Command line interface for trellis."""
