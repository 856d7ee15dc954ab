"""Shared utilities for key handling, logging, and connection checks."""

__all__ = [
    "keys",
    "logging",
    "permissions",
]
