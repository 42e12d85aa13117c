"""chronodx command-line interface."""

from chronodx.cli.main import app, main

__all__ = ["app", "main"]
