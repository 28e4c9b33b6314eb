"""Document model"""

from sqlalchemy import Column, String, JSON, Index
from backend.app.core.database import Base
from backend.app.models.base import TimestampMixin


class Document(Base, TimestampMixin):
    """A schemaless document addressed by collection name and document id"""

    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(128), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_documents_collection_created_at", "collection", "created_at"),
    )

    def __repr__(self):
        return f"<Document(collection={self.collection}, id={self.id})>"
