"""
Database models -- SQLAlchemy ORM definitions.
A single generic table holds every (collection, key) -> fields document,
so the SQL backend exposes the same shape as the hosted document store.
Compatible with both PostgreSQL and SQLite.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, JSON, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredDocument(Base):
    """
    One content document.
    Table: content_documents (primary key is collection + key).
    """
    __tablename__ = "content_documents"

    collection = Column(String(128), primary_key=True)
    key = Column(String(255), primary_key=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_content_documents_created", "collection", "created_at"),
    )
