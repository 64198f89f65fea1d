"""Unit tests for the database layer: URL handling, entities and repositories."""
