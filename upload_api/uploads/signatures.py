"""Magic-byte content sniffing.

The client's declared Content-Type is attacker controlled, so the type of an
upload is decided from its leading bytes only.
"""

import filetype
from beartype import beartype

# filetype never reads past this many leading bytes
SNIFF_LENGTH = 8192


@beartype
def sniff_mime_type(data: bytes) -> str | None:
    """Detect a MIME type from the leading bytes of ``data``, or ``None`` if unknown."""
    if not data:
        return None
    return filetype.guess_mime(data[:SNIFF_LENGTH])


def is_allowed(mime_type: str | None, allowed: tuple[str, ...] | list[str]) -> bool:
    """Match a sniffed type against entries like ``image/*`` or ``application/pdf``."""
    if not mime_type:
        return False

    category = mime_type.split("/", 1)[0]
    for entry in allowed:
        entry = entry.strip().lower()
        if entry == mime_type or entry in ("*", "*/*"):
            return True
        if entry.endswith("/*") and entry[:-2] == category:
            return True
    return False
