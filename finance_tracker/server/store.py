"""
Document Store for the REST service

Each collection (transactions, categories, budgets) is a JSON list of
documents kept in one slot, queried and mutated by id only. No joins and
no transactions spanning collections.
"""

import secrets
from pathlib import Path
from typing import Optional, Union

from finance_tracker.config.settings import ServerSettings
from finance_tracker.services.storage.slots import SlotStore


def new_document_id() -> str:
    """24 hex characters, object-id style."""
    return secrets.token_hex(12)


class DocumentCollection:
    """One named collection of JSON documents."""

    def __init__(self, name: str, slots: SlotStore):
        self.name = name
        self._slots = slots

    def find_all(self) -> list[dict]:
        return self._slots.read(self.name)

    def find_one(self, document_id: str) -> Optional[dict]:
        return next((d for d in self.find_all() if d.get("id") == document_id), None)

    def insert_one(self, document: dict) -> dict:
        """Store a copy of the document with a fresh id and return it."""
        stored = {**document, "id": new_document_id()}
        self._slots.mutate(self.name, lambda documents: [*documents, stored])
        return stored

    def update_one(self, document_id: str, changes: dict) -> bool:
        """Merge `changes` into the document with this id. Returns whether one matched."""
        matched = False

        def apply(documents: list[dict]) -> list[dict]:
            nonlocal matched
            updated = []
            for document in documents:
                if not matched and document.get("id") == document_id:
                    matched = True
                    document = {**document, **changes}
                updated.append(document)
            return updated

        self._slots.mutate(self.name, apply)
        return matched

    def delete_one(self, document_id: str) -> bool:
        """Remove the first document with this id. Returns whether one was removed."""
        removed = False

        def apply(documents: list[dict]) -> list[dict]:
            nonlocal removed
            kept = []
            for document in documents:
                if not removed and document.get("id") == document_id:
                    removed = True
                    continue
                kept.append(document)
            return kept

        self._slots.mutate(self.name, apply)
        return removed


class DocumentStore:
    """The REST service's database: named collections in one directory."""

    def __init__(self, data_dir: Union[str, Path], lock_timeout: float = 5.0):
        self._slots = SlotStore(data_dir, lock_timeout=lock_timeout)
        self._collections: dict[str, DocumentCollection] = {}

    @classmethod
    def from_settings(cls, settings: Optional[ServerSettings] = None) -> "DocumentStore":
        settings = settings or ServerSettings()
        return cls(settings.data_dir, lock_timeout=settings.lock_timeout_seconds)

    def collection(self, name: str) -> DocumentCollection:
        if name not in self._collections:
            self._collections[name] = DocumentCollection(name, self._slots)
        return self._collections[name]
