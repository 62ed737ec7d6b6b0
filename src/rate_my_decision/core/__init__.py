"""Core configuration, errors and constant tables."""
