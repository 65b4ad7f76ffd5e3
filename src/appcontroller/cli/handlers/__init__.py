"""
This module contains the handler functions for the CLI commands.
"""
from .list import list_apps
from .render import render_app
from .run import run_controller

__all__ = [
    "list_apps",
    "render_app",
    "run_controller",
]
