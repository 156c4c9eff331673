"""Bigtable access module for hello-bigtable."""

from .admin import TableAdmin
from .connection import BigtableConnection
from .table import GreetingTable

__all__ = ["BigtableConnection", "GreetingTable", "TableAdmin"]
