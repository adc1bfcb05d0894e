"""Ambient infrastructure: configuration, logging and result objects."""
