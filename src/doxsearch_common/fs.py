"""Filesystem utilities using pathlib for safe, typed operations.

Examples
--------
>>> from pathlib import Path
>>> from doxsearch_common.fs import atomic_write, read_text
>>> atomic_write(Path("/tmp/doxsearch/all_0.js"), "var searchData=\\n[\\n];\\n")
>>> read_text(Path("/tmp/doxsearch/all_0.js")).startswith("var searchData")
True
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

__all__ = [
    "atomic_write",
    "read_text",
]


def read_text(path: Path, encoding: str = "utf-8") -> str:
    """Read text file contents with explicit encoding.

    Newlines are returned untranslated so generated files survive a
    read/write cycle byte for byte.

    Parameters
    ----------
    path : Path
        File path to read.
    encoding : str, optional
        Text encoding. Defaults to "utf-8".

    Returns
    -------
    str
        File contents as a decoded string.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    UnicodeDecodeError
        If the file cannot be decoded with the specified encoding.
    """
    with path.open(encoding=encoding, newline="") as handle:
        return handle.read()


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write text atomically using a temporary file and rename.

    The final file is either completely written or not present; concurrent
    readers never see a partial file.

    Parameters
    ----------
    path : Path
        Final file path. Parent directories are created if needed.
    data : str
        Text content to write, written without newline translation.
    encoding : str, optional
        Text encoding. Defaults to "utf-8".
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=str(path.parent),
            delete=False,
            encoding=encoding,
            newline="",
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as temp_file:
            tmp_path = Path(temp_file.name)
            temp_file.write(data)
            temp_file.flush()
        tmp_path.replace(path)
    finally:
        if tmp_path is not None and sys.exc_info()[0] is not None:
            tmp_path.unlink(missing_ok=True)
