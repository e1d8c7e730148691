"""Integrations with third-party parsers and converters."""
