"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contract the loader needs from its file-I/O
collaborator so the controller can be exercised with in-memory fakes and the
filesystem adapter can be swapped out (editor buffers, remote mounts).

Contents
--------
* :class:`FileIO` – fetches file contents and modification times.

System Role
-----------
:class:`lib_typed_dotenv.application.loader.EnvFileLoader` depends on this
protocol only; :class:`lib_typed_dotenv.adapters.file_io.local.LocalFileIO` is
the default implementation.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class FileIO(Protocol):
    """Fetch dotenv file contents and modification timestamps.

    Why
    ----
    The loader treats both operations as fallible: either may raise, and
    :meth:`read_many` may report per-path failures instead of raising.
    """

    def read_many(
        self, paths: Iterable[str]
    ) -> Tuple[Mapping[str, Sequence[str]], Mapping[str, str]]:
        """Return ``(contents, errors)`` where contents map path to lines and errors map path to a message."""

    def get_mtime(self, path: str) -> float:
        """Return the modification timestamp of *path*."""
