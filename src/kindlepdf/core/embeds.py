"""Recursive ![[embed]] resolution into one flat markdown document"""

import logging
from pathlib import PurePosixPath
from typing import Optional

from kindlepdf.core.anchors import extract_anchor
from kindlepdf.core.models import Document, EmbedReference
from kindlepdf.core.parse import parse_embed, strip_frontmatter
from kindlepdf.core.utils.datauri import data_uri, image_mime
from kindlepdf.vault.base import Vault


logger = logging.getLogger(__name__)

MAX_EMBED_DEPTH = 10


def _matches(path: str, target: str) -> bool:
    """True when target is the file's name (with or without extension) or a suffix of its path.

    The path suffix is a plain string test, so 'note.md' also matches 'keynote.md'.
    An extensionless path ('folder/note') matches on whole segments only.
    """
    p = PurePosixPath(path)
    if target in (p.name, p.stem) or path.endswith(target):
        return True
    bare = p.with_suffix("").as_posix()
    return bare == target or bare.endswith("/" + target)


def find_target(links: list[str], target: str) -> Optional[str]:
    """First linked path matching target, in link-graph order."""
    return next((p for p in links if _matches(p, target)), None)


def embed_image(doc: Document, vault: Vault) -> str:
    """Markdown image line carrying the file's bytes as a data URI."""
    return f"![{doc.basename}]({data_uri(vault.read_binary(doc), image_mime(doc.extension))})"


def embed_note(doc: Document, ref: EmbedReference, vault: Vault, depth: int) -> str:
    """Body of the note (or of its anchored part) with its own embeds resolved."""
    text = strip_frontmatter(vault.read_text(doc))
    return resolve_embeds(extract_anchor(text, ref), doc, vault, depth + 1)


def _resolve_line(line: str, source: Document, vault: Vault, depth: int) -> Optional[str]:
    """Replacement for one line; None drops the line."""
    ref = parse_embed(line)
    if ref is None:
        return line

    matched = find_target(vault.links_from(source.path), ref.target)
    doc = vault.get_document(matched) if matched else None
    if doc is None:
        logger.warning("Unresolved embed '%s' in %s; kept as is", ref.target, source.path)
        return line
    if doc.path == source.path:
        logger.debug("Dropping self-embed in %s", source.path)
        return None

    if doc.is_image:
        return embed_image(doc, vault)
    if doc.is_markdown:
        return embed_note(doc, ref, vault, depth)
    logger.info("Embed '%s' has unsupported type '%s'; kept as is", doc.path, doc.extension)
    return line


def resolve_embeds(content: str, source: Document, vault: Vault, depth: int = 0) -> str:
    """Replace every resolvable embed in content, line by line, depth first.

    Images become data-URI image lines, notes are inlined recursively with
    source set to the embedded note. Unmatched or unsupported embeds keep their
    line; self-embeds are removed. Beyond MAX_EMBED_DEPTH content is returned
    untouched, which also ends cyclic embed chains.
    """
    if depth > MAX_EMBED_DEPTH:
        logger.warning("Embed depth limit (%d) reached in %s", MAX_EMBED_DEPTH, source.path)
        return content

    resolved = (_resolve_line(line, source, vault, depth) for line in content.split("\n"))
    return "\n".join(line for line in resolved if line is not None)
