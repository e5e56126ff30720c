"""Filename sanitization and collision-free name resolution."""

import os
import re
from collections.abc import Iterator

from beartype import beartype

from upload_api.uploads.storage import UploadsNamespace

# Most filesystems cap a single name at 255 bytes; keep room for a "_N" suffix
MAX_NAME_BYTES = 255
SUFFIX_RESERVE = 16
MAX_SANITIZED_LENGTH = MAX_NAME_BYTES - SUFFIX_RESERVE
MAX_EXTENSION_LENGTH = 32

_TRAVERSAL_RE = re.compile(r"\.\.[/\\]")
_UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9.-]", re.IGNORECASE)
_RESERVED_NAMES = frozenset({"", ".", ".."})


def _truncate(filename: str) -> str:
    if len(filename) <= MAX_SANITIZED_LENGTH:
        return filename
    stem, ext = os.path.splitext(filename)
    if len(ext) > MAX_EXTENSION_LENGTH:
        stem, ext = filename, ""
    return stem[: MAX_SANITIZED_LENGTH - len(ext)] + ext


@beartype
def sanitize_filename(filename: str) -> str:
    """Make a client filename safe for the flat uploads namespace.

    Drops ``../`` and ``..\\`` sequences, replaces every character outside
    ``[a-z0-9.-]`` with ``_``, lower-cases the result and shortens the stem
    so any deduplicated name still fits in one directory entry. Idempotent.
    """
    filename = _TRAVERSAL_RE.sub("", filename)
    filename = _truncate(_UNSAFE_CHARS_RE.sub("_", filename).lower())
    if filename in _RESERVED_NAMES:
        filename = f"_{filename}"
    return filename


def candidate_names(filename: str) -> Iterator[str]:
    """Yield ``name``, ``stem_1.ext``, ``stem_2.ext``, ... for a sanitized name."""
    yield filename
    stem, ext = os.path.splitext(filename)
    counter = 1
    while True:
        yield f"{stem}_{counter}{ext}"
        counter += 1


class NameResolver:
    """Resolves sanitized filenames to names unused in the namespace.

    Names handed out by one resolver are remembered, so files of the same
    request never collide with each other even before anything is written.
    """

    def __init__(self, namespace: UploadsNamespace) -> None:
        self.namespace = namespace
        self.reserved: set[str] = set()

    def is_taken(self, name: str) -> bool:
        return name in self.reserved or self.namespace.exists(name)

    def resolve(self, filename: str) -> str:
        name = next(c for c in candidate_names(sanitize_filename(filename)) if not self.is_taken(c))
        self.reserved.add(name)
        return name
