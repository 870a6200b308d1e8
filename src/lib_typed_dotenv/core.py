"""Composition root for ``lib_typed_dotenv``.

Purpose
-------
Wire the local filesystem collaborator, the parse cache and the loader into a
process-wide default and expose the stable, consumer-facing API.

Contents
--------
* :func:`parse_files` – parse many dotenv files at once.
* :func:`load_env_file` – parse a single file, raising on failure.
* :func:`detect_type` – classify one value with optional custom rules.
* :func:`clear_cache` / :func:`cache_stats` – manage the shared cache.
* :func:`default_loader` – the shared :class:`EnvFileLoader` instance.

System Role
-----------
The CLI and embedding applications call into this module only; adapters and
application services stay replaceable behind it.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .adapters.file_io.local import LocalFileIO
from .adapters.file_loaders.structured import load_matcher_file
from .application.cache import ParseCache
from .application.loader import EnvFileLoader, LoadResult
from .application.options import ParseOptions
from .domain.errors import FileAccessError
from .domain.records import VariableRecord

Options = Mapping[str, Any] | ParseOptions | None

_DEFAULT_LOADER = EnvFileLoader(LocalFileIO(), cache=ParseCache())


def default_loader() -> EnvFileLoader:
    """Return the loader shared by the module-level helpers."""

    return _DEFAULT_LOADER


def parse_files(file_paths: Iterable[str] | None, options: Options = None) -> LoadResult:
    """Parse *file_paths* with the shared loader.

    Why
    ----
    Most callers want one cache per process; this helper hides the wiring.

    Returns
    -------
    LoadResult
        ``(results, errors)``; unpacks as a pair.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> from pathlib import Path
    >>> tmp = TemporaryDirectory()
    >>> env = Path(tmp.name) / '.env'
    >>> _ = env.write_text('API_URL=https://api.example.com\\n', encoding='utf-8')
    >>> results, errors = parse_files([str(env)])
    >>> results[str(env)]['API_URL'].type, errors
    ('url', {})
    >>> tmp.cleanup()
    """

    return _DEFAULT_LOADER.parse_files(file_paths, options)


def load_env_file(path: str, options: Options = None) -> Mapping[str, VariableRecord]:
    """Return the variables of a single dotenv file.

    Raises
    ------
    FileAccessError
        When the file cannot be stat'ed or read.
    """

    results, errors = _DEFAULT_LOADER.parse_files([path], options)
    if path in errors:
        raise FileAccessError(errors[path])
    return results[path]


def detect_type(value: str, options: Options = None) -> tuple[str, str]:
    """Return ``(type_name, value)`` for *value*.

    Examples
    --------
    >>> detect_type("#ff8800")
    ('hex_color', '#ff8800')
    >>> detect_type("v1.2", {"custom_types": [{"name": "tag", "pattern": r"^v\\d"}]})
    ('tag', 'v1.2')
    """

    return ParseOptions.from_mapping(options).registry().detect_type(value)


def clear_cache() -> None:
    """Drop every cached parse result and reset the hit/miss counters."""

    _DEFAULT_LOADER.cache.clear()


def cache_stats() -> dict[str, int]:
    return _DEFAULT_LOADER.cache.stats()


__all__ = [
    "LoadResult",
    "cache_stats",
    "clear_cache",
    "default_loader",
    "detect_type",
    "load_env_file",
    "load_matcher_file",
    "parse_files",
]
