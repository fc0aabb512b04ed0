"""Core schemas and provenance helpers."""
