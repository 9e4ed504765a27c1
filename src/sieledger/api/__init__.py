"""HTTP API for sieledger."""
