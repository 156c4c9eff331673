"""Configuration module for hello-bigtable."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
