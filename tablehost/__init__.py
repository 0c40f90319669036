"""Local table host: one presentation client against house bots over WebSockets."""

from .server import TableHost, TableHostError

__all__ = ["TableHost", "TableHostError"]
