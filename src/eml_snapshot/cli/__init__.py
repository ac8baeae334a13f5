"""
CLI module for email rendering.

Provides command-line tools for rendering local .eml files.
"""

from eml_snapshot.cli.render import main as render_main

__all__ = ["render_main"]
