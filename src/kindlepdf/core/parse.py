"""Frontmatter handling and embed marker parsing"""

import re
from typing import Any, Optional

import yaml

from kindlepdf.core.models import EmbedReference


FRONTMATTER_MARKER = "---"
FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)
EMBED_RE = re.compile(r'!\[\[([^\]]+)\]\]')


def strip_frontmatter(text: str) -> str:
    """Drop a leading '---' ... '---' block and the whitespace after it.

    Text without an opening marker, or without a closing one, is returned as is.
    """
    if not text.startswith(FRONTMATTER_MARKER):
        return text
    end = text.find(FRONTMATTER_MARKER, len(FRONTMATTER_MARKER))
    if end == -1:
        return text
    return text[end + len(FRONTMATTER_MARKER):].lstrip()


def read_frontmatter(text: str) -> dict[str, Any]:
    """Return the YAML frontmatter mapping, or {} when there is none."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm


def parse_embed(line: str) -> Optional[EmbedReference]:
    """Parse the first ![[target#anchor|alias]] marker on line, else None.

    Only the first '#'-separated anchor segment is kept; a '|' display alias is dropped.
    """
    m = EMBED_RE.search(line)
    if not m:
        return None
    ref = m.group(1).split("|", 1)[0]
    target, _, anchor = ref.partition("#")
    anchor = anchor.split("#", 1)[0]
    target = target.strip()
    if not target:
        return None
    return EmbedReference(target=target, anchor=anchor or None)
