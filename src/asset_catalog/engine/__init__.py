"""Catalog engine: services, models and lifecycle."""
