"""Shared helpers used across docwatch packages."""
