"""REST service package (the remote record store)."""

from finance_tracker.server.store import DocumentCollection, DocumentStore, new_document_id

__all__ = ["DocumentCollection", "DocumentStore", "new_document_id"]
