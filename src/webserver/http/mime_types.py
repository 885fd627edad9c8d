"""
=============================================================================
CONTENT-TYPE CLASSIFICATION
=============================================================================

Maps a file name to the MIME type reported in the Content-type header.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     EXTENSION → CONTENT TYPE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   jpeg, jpg      →  image/jpeg                                       │
    │   ico            →  image/x-ico                                      │
    │   pdf            →  application/pdf                                  │
    │   anything else  →  text/plain                                       │
    │   (no dot)       →  text/html                                        │
    │                                                                      │
    │   Matching is case-insensitive: .JPG, .Jpg and .jpg are the same.   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHERE DOES THE EXTENSION START?
=============================================================================

At the FIRST dot in the name, not the last one:

    image.jpg         →  "jpg"       →  image/jpeg
    archive.tar.gz    →  "tar.gz"    →  text/plain
    v1.2/photo.jpg    →  "2/photo.jpg" → text/plain
    README            →  None        →  text/html
    notes.            →  ""          →  text/plain

This differs from Path.suffix, so pathlib is not used here. Names without
a dot are served as HTML, so Makefile and README render in the browser.

=============================================================================
"""

from typing import Optional


MIME_TYPES = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "ico": "image/x-ico",
    "pdf": "application/pdf",
}

# Any extension not listed in MIME_TYPES
DEFAULT_MIME_TYPE = "text/plain"

# Names with no extension at all
NO_EXTENSION_MIME_TYPE = "text/html"


def get_extension(name: str) -> Optional[str]:
    """
    Get the extension of a file name.

    Args:
        name: File name or relative path, without the leading slash.

    Returns:
        Everything after the first ".", or None if there is no dot.

    Examples:
        >>> get_extension("image.jpg")
        'jpg'

        >>> get_extension("archive.tar.gz")
        'tar.gz'

        >>> get_extension("Makefile") is None
        True
    """
    _, dot, extension = name.partition(".")
    if not dot:
        return None
    return extension


def get_content_type(extension: Optional[str]) -> str:
    """
    Get the MIME type for an extension.

    Never fails: unknown extensions are text/plain and a missing
    extension is text/html.

    Examples:
        >>> get_content_type("JPG")
        'image/jpeg'

        >>> get_content_type("txt")
        'text/plain'

        >>> get_content_type(None)
        'text/html'
    """
    if extension is None:
        return NO_EXTENSION_MIME_TYPE
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def classify(name: str) -> str:
    """Get the MIME type for a file name."""
    return get_content_type(get_extension(name))
