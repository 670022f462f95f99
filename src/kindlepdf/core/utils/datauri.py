"""Data URI encoding for inlined images"""

import base64


def image_mime(extension: str) -> str:
    """MIME type for an image extension ('svg' -> 'image/svg+xml', 'jpg' -> 'image/jpeg')."""
    ext = extension.lower()
    if ext == "svg":
        return "image/svg+xml"
    return f"image/{'jpeg' if ext == 'jpg' else ext}"


def data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
