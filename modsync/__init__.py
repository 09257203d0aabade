"""Synchronized releases for Composer-style monorepos."""

__version__ = "0.1.0"
