"""Route group exports."""

from . import health, transport

__all__ = ["health", "transport"]
