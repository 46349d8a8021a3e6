"""
db/base.py

Declarative base for the metrics store.
"""

from typing import Any

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Shared metadata for every table created by ``create_session_factory``.
    """

    type_annotation_map: dict[type, Any] = {}
