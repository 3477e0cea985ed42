# models/stored_document.py
"""
Storage row for the serialized ledger document.
One row per store key; payload holds the whole document as JSON.
"""
from sqlalchemy import Column, DateTime, Integer, String, Text
from models.base import Base, _get_current_time


class StoredDocument(Base):
    __tablename__ = 'stored_documents'

    storeKey = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    revision = Column(Integer, nullable=False, default=0)

    createdAt = Column(DateTime, default=_get_current_time)
    updatedAt = Column(DateTime, default=_get_current_time, onupdate=_get_current_time)

    def __repr__(self):
        return f"<StoredDocument(key={self.storeKey}, revision={self.revision})>"
