"""Helpers shared across the resolver: HTTP access and logging context."""
