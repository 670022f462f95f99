"""Sub-range extraction for #heading and #^block embed anchors.

Anchors are matched as plain substrings rather than against a heading index,
so the first occurrence of the anchor text wins. Whenever the anchor cannot be
found the text is returned unmodified.
"""

import logging
import re

from kindlepdf.core.models import AnchorKind, EmbedReference


logger = logging.getLogger(__name__)

NEXT_HEADING = "\n#"
NEXT_HEADING_MIN_OFFSET = 10
PARAGRAPH_BREAK_RE = re.compile(r'\n[ \t]*\n')


def extract_block(text: str, anchor: str) -> str:
    """Text of the line carrying ^anchor, up to the anchor itself.

    An anchor alone on its line labels the paragraph above it, which is returned instead.
    """
    idx = text.find(anchor)
    if idx == -1:
        logger.warning("Block anchor '%s' not found; embedding whole note", anchor)
        return text
    line_start = max(text.rfind("\n", 0, idx), 0)
    block = text[line_start:idx].strip()
    if block:
        return block
    return PARAGRAPH_BREAK_RE.split(text[:line_start].rstrip())[-1].strip()


def extract_heading(text: str, anchor: str) -> str:
    """Content under the heading text anchor, up to the next heading line."""
    idx = text.find(anchor)
    if idx == -1:
        logger.warning("Heading anchor '%s' not found; embedding whole note", anchor)
        return text
    section = text[idx:].replace(anchor, "", 1).lstrip()
    end = section.find(NEXT_HEADING, NEXT_HEADING_MIN_OFFSET)
    return section if end == -1 else section[:end]


def extract_anchor(text: str, ref: EmbedReference) -> str:
    """Part of text selected by ref's anchor; the whole text when it has none."""
    if ref.anchor_kind == AnchorKind.block:
        return extract_block(text, ref.anchor)
    if ref.anchor_kind == AnchorKind.heading:
        return extract_heading(text, ref.anchor)
    return text
