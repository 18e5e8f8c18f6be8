"""Command-line interface module for Restricted XML Parser."""

from .main import main

__all__ = ["main"]
