"""Flat on-disk namespace for persisted uploads."""

import os
from pathlib import Path


class UploadsNamespace:
    """A flat directory of uploaded files, shared by all requests."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"UploadsNamespace({str(self.root)!r})"

    def ensure(self) -> "UploadsNamespace":
        """Create the directory if it does not exist. Returns self for chaining."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self

    def path_for(self, name: str) -> Path:
        if not name or name in (".", "..") or Path(name).name != name:
            raise ValueError(f"Not a plain file name: {name!r}")
        return self.root / name

    def exists(self, name: str) -> bool:
        """Advisory check. Another request may claim the name right after."""
        return self.path_for(name).exists()

    def write_exclusive(self, name: str, data: bytes) -> Path:
        """Create ``name`` and write ``data`` to it.

        Raises :class:`FileExistsError` if the name is already taken, so a
        concurrent writer can never be overwritten.
        """
        path = self.path_for(name)
        with path.open("xb") as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        return path

    def is_writable(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.W_OK)

    def names(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())
