"""Generation studio CLI bootstrap."""

from __future__ import annotations

from genstudio.cli.app import app

if __name__ == "__main__":
    app()
