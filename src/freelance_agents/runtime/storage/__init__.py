"""Runtime persistence: repository interfaces, file-backed implementations, container."""

from .container import Container

__all__ = ["Container"]
