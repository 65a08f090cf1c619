"""Persistence gateway services."""
