"""Markdown clean-up passes and standalone HTML document assembly"""

import re

from markdown_it import MarkdownIt


COMMENT_RE   = re.compile(r'%%[\s\S]*?%%')
DATAVIEW_RE  = re.compile(r'```dataview(?:js)?[\s\S]*?```')
HIGHLIGHT_RE = re.compile(r'==([\s\S]*?)==')
HR_LINE_RE   = re.compile(r'^---$', re.MULTILINE)

DATA_IMAGE_PREFIX = "data:image/"
PAGE_BREAK = '<div class="kindle-pdf-page-break"></div>'

STYLE_SHEET = """\
  body {
    margin: 0;
    padding: 40px;
    background: white;
    color: black;
    font-family: Georgia, "Times New Roman", serif;
    font-size: %(font_size)spx;
    line-height: 1.6;
  }
  h1 { font-size: 1.8em; margin-top: 0.8em; margin-bottom: 0.4em; }
  h2 { font-size: 1.5em; margin-top: 0.7em; margin-bottom: 0.3em; }
  h3 { font-size: 1.3em; margin-top: 0.6em; margin-bottom: 0.3em; }
  h4, h5, h6 { font-size: 1.1em; margin-top: 0.5em; margin-bottom: 0.2em; }
  p { margin-top: 0.4em; margin-bottom: 0.4em; }
  img { max-width: 100%%; height: auto; }
  pre {
    background: #f4f4f4;
    border: 1px solid #ddd;
    border-radius: 4px;
    padding: 12px;
    overflow-x: auto;
    font-family: "Courier New", Courier, monospace;
    font-size: 0.9em;
    line-height: 1.4;
  }
  code {
    font-family: "Courier New", Courier, monospace;
    font-size: 0.9em;
    background: #f4f4f4;
    padding: 2px 4px;
    border-radius: 3px;
  }
  pre code { background: none; padding: 0; }
  blockquote {
    border-left: 3px solid #999;
    margin-left: 0;
    padding-left: 16px;
    color: #555;
    font-style: italic;
  }
  ul, ol { padding-left: 24px; margin-top: 0.4em; margin-bottom: 0.4em; }
  li { margin-bottom: 0.2em; }
  mark { background: #fff3a8; padding: 1px 2px; }
  hr { border: none; border-top: 1px solid #ccc; margin: 1em 0; }
  table { border-collapse: collapse; width: 100%%; margin: 0.5em 0; }
  th, td { border: 1px solid #ccc; padding: 6px 10px; text-align: left; }
  th { background: #f4f4f4; font-weight: bold; }
  .kindle-pdf-page-break { page-break-after: always; break-after: page; }
"""

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
{style}</style>
</head>
<body>
<h1>{title}</h1>
{body}
</body>
</html>"""


def strip_comments(text: str) -> str:
    return COMMENT_RE.sub("", text)


def strip_dataview(text: str) -> str:
    """Remove ```dataview / ```dataviewjs blocks, fences included."""
    return DATAVIEW_RE.sub("", text)


def mark_highlights(text: str) -> str:
    return HIGHLIGHT_RE.sub(r"<mark>\1</mark>", text)


def insert_page_breaks(text: str) -> str:
    """Replace each line consisting only of '---' with a page-break div."""
    return HR_LINE_RE.sub(PAGE_BREAK, text)


def escape_html(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def preprocess(markdown: str, page_break_on_hr: bool = False) -> str:
    """Apply the clean-up passes in order: comments, dataview, highlights, page breaks."""
    text = mark_highlights(strip_dataview(strip_comments(markdown)))
    return insert_page_breaks(text) if page_break_on_hr else text


def _make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance; raw HTML stays enabled for <mark> and page breaks."""
    md = MarkdownIt(preset, options_update={"linkify": False, "html": True})
    default_validate = md.validateLink
    # inlined images of every type (svg, bmp included) are data URIs
    md.validateLink = lambda url: url.lower().startswith(DATA_IMAGE_PREFIX) or default_validate(url)
    return md


def render_body(markdown: str) -> str:
    return _make_parser().render(markdown)


def markdown_to_html(markdown: str, title: str, font_size: int = 14, page_break_on_hr: bool = False) -> str:
    """Return a complete, self-contained HTML page for the resolved note."""
    body = render_body(preprocess(markdown, page_break_on_hr))
    return HTML_TEMPLATE.format(
        style=STYLE_SHEET % {"font_size": font_size},
        title=escape_html(title),
        body=body,
    )
