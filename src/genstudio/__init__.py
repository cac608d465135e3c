"""Genstudio - framework-driven AI generation sessions."""

from .client import StudioClient
from .session import SessionController

__version__ = "0.1.0"

__all__ = ["SessionController", "StudioClient"]
