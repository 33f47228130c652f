"""Data model for the node engine."""
