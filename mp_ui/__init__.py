"""Command-line front end for machine-provisioner."""

from mp_ui.cli import app, main

__all__ = ["app", "main"]
