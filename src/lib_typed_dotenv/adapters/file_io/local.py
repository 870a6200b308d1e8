"""Local filesystem implementation of the :class:`FileIO` port.

Purpose
-------
Read dotenv files from disk as UTF-8 text and report modification times for
the loader's cache checks.

System Role
-----------
Default collaborator for :class:`lib_typed_dotenv.application.loader.EnvFileLoader`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from ...application.line_parser import split_lines
from ...domain.errors import FileAccessError
from ...observability import log_debug


class LocalFileIO:
    """Read dotenv files from the local filesystem.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = str(Path(tmp.name) / '.env')
    >>> _ = Path(path).write_text('A=1\\nB=2\\n', encoding='utf-8')
    >>> contents, errors = LocalFileIO().read_many([path])
    >>> contents[path], errors
    (['A=1', 'B=2'], {})
    >>> tmp.cleanup()
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read_many(self, paths: Iterable[str]) -> tuple[dict[str, list[str]], dict[str, str]]:
        """Return ``(contents, errors)`` for *paths*.

        Files that cannot be opened or decoded land in ``errors`` with a
        human-readable message; nothing is raised.
        """

        contents: dict[str, list[str]] = {}
        errors: dict[str, str] = {}
        for path in paths:
            try:
                text = Path(path).read_bytes().decode(self._encoding)
            except FileNotFoundError:
                errors[path] = f"File not found: {path}"
            except IsADirectoryError:
                errors[path] = f"Not a file: {path}"
            except PermissionError:
                errors[path] = f"Permission denied: {path}"
            except UnicodeDecodeError as exc:
                errors[path] = f"Cannot decode {path} as {self._encoding}: {exc.reason}"
            except OSError as exc:
                errors[path] = f"Cannot read {path}: {exc.strerror or exc}"
            else:
                contents[path] = split_lines(text)
                log_debug("dotenv_file_read", stage="fetch", path=path, size=len(text))
        return contents, errors

    def get_mtime(self, path: str) -> float:
        """Return the modification time of *path*.

        Raises
        ------
        FileAccessError
            When the path cannot be stat'ed.
        """

        try:
            return os.stat(path).st_mtime
        except OSError as exc:
            raise FileAccessError(f"Cannot stat {path}: {exc.strerror or exc}") from exc
