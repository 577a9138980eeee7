"""Repository URL handling, hosting clients and checkout helpers."""
