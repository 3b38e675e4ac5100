"""Configuration loading and tabular I/O."""
