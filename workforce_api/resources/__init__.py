"""Resource definitions and the generic SQL behind their CRUD routes."""

from .base import Resource
from .registry import RESOURCES

__all__ = ["Resource", "RESOURCES"]
