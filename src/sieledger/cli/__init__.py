"""Command line interface for sieledger."""
