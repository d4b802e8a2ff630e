"""
Filesystem access used by Config.

Kept behind a four-method protocol so that tests and embedders can swap the
local disk for anything else.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Byte-level persistence of one text file per path."""

    def exists(self, path: str) -> bool: ...

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, text: str) -> None: ...

    def delete_file(self, path: str) -> None: ...


class LocalFileStorage:
    """
    Local disk storage with pathlib.

    Writes create missing parent directories. All errors are plain OSError,
    Config turns them into diagnostics.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def exists(self, path: str) -> bool:
        return bool(path) and Path(path).is_file()

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding=self.encoding)

    def write_text(self, path: str, text: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding=self.encoding)

    def delete_file(self, path: str) -> None:
        Path(path).unlink()
