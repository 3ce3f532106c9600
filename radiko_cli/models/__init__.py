"""
Data Models Layer.

This package contains the Pydantic model for the application configuration.
"""

from .config import AppConfig

__all__ = ["AppConfig"]
