"""
Declarative Base re-export for ORM models
"""
from app.database import Base

__all__ = ["Base"]
