"""Logging, validation, filename and resource helpers."""
