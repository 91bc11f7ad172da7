"""Database connection and session management."""

from .connection import DatabaseManager
from .models import Base, TaskRecord

__all__ = ["Base", "DatabaseManager", "TaskRecord"]
