"""Typed Python step factories for GitHub Actions."""
