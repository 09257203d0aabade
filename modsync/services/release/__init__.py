"""Synchronized monorepo releases."""
