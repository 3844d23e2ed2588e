"""
Declarative base shared by the trade journal tables.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for journal models."""
    pass
