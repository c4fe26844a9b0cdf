"""Asset references: integrity hashes, data URIs and hosted URLs.

Integrity values use the Subresource Integrity form
``sha256-<base64 digest>`` over the raw asset bytes.
"""

import base64
import hashlib
import mimetypes
from pathlib import Path

import filetype

SVG_MIME = "image/svg+xml"
FALLBACK_MIME = "application/octet-stream"


def integrity_of(data: bytes) -> str:
    """Return the ``sha256-<base64>`` integrity string for ``data``."""
    digest = hashlib.sha256(data).digest()
    return "sha256-" + base64.b64encode(digest).decode("ascii")


def calculate_integrity(path: str | Path) -> str:
    """Integrity string for the file at ``path``.

    Raises:
        OSError: If the file cannot be read.
    """
    return integrity_of(Path(path).read_bytes())


def sniff_mime_type(data: bytes, path: str = "") -> str:
    """Detect the MIME type of ``data``.

    ``.svg`` paths are always ``image/svg+xml``; otherwise the content
    signature decides, then the file extension.
    """
    if path.lower().endswith(".svg"):
        return SVG_MIME
    mime = filetype.guess_mime(data)
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(path)
    return guessed or FALLBACK_MIME


def data_uri(path: str | Path) -> str:
    """Embed the file at ``path`` as a ``data:<mime>;base64,...`` URI.

    Raises:
        OSError: If the file cannot be read.
    """
    data = Path(path).read_bytes()
    mime = sniff_mime_type(data, str(path))
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def build_asset_url(base_url: str, path: str) -> str:
    """Join a document-relative asset path onto the registry base URL."""
    if path.startswith("http"):
        return path
    if path.startswith("./"):
        path = path[2:]
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
