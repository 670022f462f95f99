from dataclasses import dataclass, field
from typing import Optional, Union

from kindlepdf.core.models import Document
from kindlepdf.vault.base import Vault


@dataclass
class MemoryVault(Vault):
    """In-memory vault: file contents by path plus an explicit link graph."""
    files: dict[str, Union[str, bytes]] = field(default_factory=dict)
    links: dict[str, list[str]] = field(default_factory=dict)

    def add(self, path: str, content: Union[str, bytes], links: list[str] = None) -> Document:
        self.files[path] = content
        if links is not None:
            self.links[path] = list(links)
        return Document(path)

    def links_from(self, path: str) -> list[str]:
        return list(self.links.get(path, []))

    def get_document(self, path: str) -> Optional[Document]:
        return Document(path) if path in self.files else None

    def read_text(self, doc: Document) -> str:
        content = self.files[doc.path]
        return content.decode("utf-8") if isinstance(content, bytes) else content

    def read_binary(self, doc: Document) -> bytes:
        content = self.files[doc.path]
        return content.encode("utf-8") if isinstance(content, str) else content
