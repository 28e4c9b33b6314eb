"""Data access layer"""

from backend.app.repositories.document_store import (
    DocumentStore,
    DocumentSnapshot,
    InMemoryDocumentStore,
    SQLAlchemyDocumentStore,
)

__all__ = ['DocumentStore', 'DocumentSnapshot', 'InMemoryDocumentStore', 'SQLAlchemyDocumentStore']
