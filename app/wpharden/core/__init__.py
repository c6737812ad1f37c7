"""Core infrastructure: paths, configuration and console theme."""
