"""Command-line interface for docgraph."""
