"""Presentation helpers: logging setup and rich console output."""
