"""API route definitions, grouped by version."""
