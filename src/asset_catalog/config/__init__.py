"""Configuration: pydantic-settings models."""
