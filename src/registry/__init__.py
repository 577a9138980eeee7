"""Registry clients and dispatch."""
