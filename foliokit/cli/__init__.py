"""Command line front-end for foliokit."""

from .main import cli

__all__ = ["cli"]
