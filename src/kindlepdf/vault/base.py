from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

from kindlepdf.core.models import Document


class Vault(ABC):
    """Read-only access to a vault: its link graph and its file contents."""

    @abstractmethod
    def links_from(self, path: str) -> list[str]:
        """Vault paths the document at path links to, in a stable order."""
        raise NotImplementedError

    @abstractmethod
    def get_document(self, path: str) -> Optional[Document]:
        """Return the Document at path, or None if no such file exists."""
        raise NotImplementedError

    @abstractmethod
    def read_text(self, doc: Document) -> str:
        raise NotImplementedError

    @abstractmethod
    def read_binary(self, doc: Document) -> bytes:
        raise NotImplementedError
