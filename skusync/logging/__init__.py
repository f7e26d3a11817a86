"""Logging setup and findings log."""
