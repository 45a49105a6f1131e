"""Ambient infrastructure: configuration, logging, errors, extensions."""
