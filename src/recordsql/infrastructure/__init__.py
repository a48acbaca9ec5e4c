"""Infrastructure layer: SQL generation utilities."""
