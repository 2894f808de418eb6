"""CLI package exports."""

from .app import app, main

__all__ = ["app", "main"]
