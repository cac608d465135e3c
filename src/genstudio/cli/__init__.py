"""Terminal front end for generation sessions."""

from genstudio.cli.app import app

__all__ = ["app"]
