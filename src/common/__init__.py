"""Shared helpers: HTTP capability, logging utilities, errors and timestamps."""
