"""FastAPI routers acting as controllers in the MVC architecture."""

from . import process

__all__ = ["process"]
