"""Configuration models, constants and validation."""
