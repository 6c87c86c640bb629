"""
Filesystem blob storage for downloaded media.

Blobs are addressed by a flat file name under one root folder. Writes land in a
temporary file next to the target and are renamed into place, so readers never
observe a half-written blob.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional, Union


class FileBlobStorage:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, name: str) -> Path:
        safe = Path(name).name
        if not safe or safe in {".", ".."}:
            raise ValueError(f"Invalid blob name: {name!r}")
        return self.root / safe

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def size(self, name: str) -> int:
        return self.path(name).stat().st_size

    def read_head(self, name: str, limit: int) -> bytes:
        with open(self.path(name), "rb") as f:
            return f.read(max(0, int(limit)))

    def delete(self, name: str) -> None:
        try:
            os.remove(self.path(name))
        except FileNotFoundError:
            pass

    def write(self, name: str, data: bytes) -> Path:
        return self.write_stream(name, [data])

    def write_stream(
        self,
        name: str,
        chunks: Iterable[bytes],
        validate: Optional[Callable[[Path], None]] = None,
    ) -> Path:
        """
        Write chunks to ``name`` atomically; on any error nothing is left behind.

        ``validate`` gets the finished temporary file before it is renamed into
        place and may raise to discard it.
        """
        target = self.path(name)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=str(self.root))
        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in chunks:
                    if chunk:
                        f.write(chunk)
            if validate is not None:
                validate(Path(tmp_name))
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.remove(tmp_name)
            except FileNotFoundError:
                pass
            raise
        return target
