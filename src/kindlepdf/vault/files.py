"""Directory-backed vault with an Obsidian-style link index"""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Optional

from kindlepdf.core.models import Document
from kindlepdf.vault.base import Vault


logger = logging.getLogger(__name__)

WIKILINK_RE = re.compile(r'!?\[\[([^\]]+)\]\]')
MD_SUFFIX = ".md"


def _link_target(ref: str) -> str:
    """'folder/Note#Heading|alias' -> 'folder/Note'."""
    return ref.split("|", 1)[0].split("#", 1)[0].strip()


class FileVault(Vault):
    """Vault rooted at a directory. Dot-directories such as .obsidian are ignored."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self._paths: Optional[list[str]] = None
        self._text_cache: dict[str, str] = {}

    def _all_paths(self) -> list[str]:
        if self._paths is None:
            self._paths = sorted(
                p.relative_to(self.root).as_posix()
                for p in self.root.rglob("*")
                if p.is_file() and not any(part.startswith(".") for part in p.relative_to(self.root).parts)
            )
        return self._paths

    def _full_path(self, path: str) -> Optional[Path]:
        full = (self.root / path).resolve()
        if full != self.root and self.root not in full.parents:
            return None
        return full

    def resolve_link(self, link: str, source_path: str) -> Optional[str]:
        """Resolve a wikilink target the way Obsidian does.

        An exact vault path (with or without '.md') wins. Otherwise every file
        whose path ends with the link (again with or without '.md') is a
        candidate; one in the source's folder is preferred, then the shortest
        path, then alphabetical order.
        """
        paths = self._all_paths()
        for exact in (link, link + MD_SUFFIX):
            if exact in paths:
                return exact

        suffixes = ("/" + link, "/" + link + MD_SUFFIX)
        candidates = [p for p in paths if p.endswith(suffixes)]
        if not candidates:
            return None
        folder = PurePosixPath(source_path).parent.as_posix()
        return min(candidates, key=lambda p: (PurePosixPath(p).parent.as_posix() != folder, len(p), p))

    def links_from(self, path: str) -> list[str]:
        """Resolved targets of every [[link]] and ![[embed]] in the note, in order of first appearance."""
        doc = self.get_document(path)
        if doc is None or not doc.is_markdown:
            return []
        resolved: dict[str, None] = {}
        for m in WIKILINK_RE.finditer(self.read_text(doc)):
            link = _link_target(m.group(1))
            if not link:
                continue
            target = self.resolve_link(link, path)
            if target is None:
                logger.debug("Unresolved link '%s' in %s", link, path)
                continue
            resolved.setdefault(target, None)
        return list(resolved)

    def get_document(self, path: str) -> Optional[Document]:
        full = self._full_path(path)
        if full is None or not full.is_file():
            return None
        return Document(full.relative_to(self.root).as_posix())

    def read_text(self, doc: Document) -> str:
        if doc.path not in self._text_cache:
            self._text_cache[doc.path] = (self.root / doc.path).read_text(encoding="utf-8")
        return self._text_cache[doc.path]

    def read_binary(self, doc: Document) -> bytes:
        return (self.root / doc.path).read_bytes()
