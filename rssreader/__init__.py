"""
RSS Reader Backend

A FastAPI backend for a personal RSS reader.
Provides feed ingestion, item reconciliation, article extraction and notes.
"""

__version__ = "1.0.0"
