"""Qt-facing adapters for the client core."""
