"""
Storage layer exports.
"""

from app.scraping.storage.base import CompositeResultSink, ResultSink
from app.scraping.storage.file_storage import FileResultSink, load_metrics_csv
from app.scraping.storage.sqlalchemy_storage import SQLAlchemyResultSink

__all__ = [
    "CompositeResultSink",
    "FileResultSink",
    "ResultSink",
    "SQLAlchemyResultSink",
    "load_metrics_csv",
]
