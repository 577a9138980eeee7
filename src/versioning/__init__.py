"""Specifier parsing, version ordering and selection."""
