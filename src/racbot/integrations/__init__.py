"""Integrations with external engines."""
