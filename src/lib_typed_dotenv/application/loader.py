"""Cache-aware parallel loader for many dotenv files.

Purpose
-------
Given a list of paths, fetch every file's modification time and content
concurrently, reuse cached results for files whose mtime did not change, parse
the rest, and report per-file failures without aborting the batch.

Contents
--------
* :class:`LoadResult` – ``(results, errors)`` named tuple.
* :class:`EnvFileLoader` – the controller; owns a :class:`ParseCache`.

Concurrency
-----------
Fetches fan out over a bounded :class:`~concurrent.futures.ThreadPoolExecutor`
and are joined once; parsing of stale files then runs sequentially on the
calling thread. Results are keyed by path, so no ordering between files is
implied.
"""

from __future__ import annotations

import hashlib
from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, NamedTuple, Sequence

from ..domain.records import CacheEntry, VariableRecord
from ..observability import batch_trace, log_debug, log_error, log_info, log_warning, make_event
from .cache import ParseCache
from .file_parser import parse_content
from .line_parser import split_lines
from .options import ParseOptions
from .ports import FileIO

Parser = Callable[[str, Sequence[str], ParseOptions], Mapping[str, VariableRecord]]

DEFAULT_MAX_WORKERS = 8


class LoadResult(NamedTuple):
    """Outcome of :meth:`EnvFileLoader.parse_files`.

    ``results`` maps path to ``{key: VariableRecord}``; ``errors`` maps path to
    a failure message. A path appears in at most one of them.
    """

    results: dict[str, Mapping[str, VariableRecord]]
    errors: dict[str, str]


@dataclass(frozen=True, slots=True)
class _Fetched:
    path: str
    mtime: float | None = None
    lines: Sequence[str] | None = None
    error: str | None = None


class EnvFileLoader:
    """Parse many dotenv files, reusing cached results keyed by mtime.

    Parameters
    ----------
    file_io:
        Collaborator implementing :class:`~lib_typed_dotenv.application.ports.FileIO`.
        Defaults to :class:`~lib_typed_dotenv.adapters.file_io.local.LocalFileIO`.
    cache:
        Cache shared across calls; a fresh :class:`ParseCache` by default.
    max_workers:
        Upper bound on concurrent fetches.
    parser:
        Function turning ``(path, lines, options)`` into records; defaults to
        :func:`~lib_typed_dotenv.application.file_parser.parse_content`.

    Examples
    --------
    >>> class MemoryIO:
    ...     def read_many(self, paths):
    ...         return {p: ["GREETING=hello"] for p in paths}, {}
    ...     def get_mtime(self, path):
    ...         return 1.0
    >>> loader = EnvFileLoader(MemoryIO())
    >>> results, errors = loader.parse_files(["/app/.env"])
    >>> results["/app/.env"]["GREETING"].value, errors
    ('hello', {})
    """

    def __init__(
        self,
        file_io: FileIO | None = None,
        *,
        cache: ParseCache | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        parser: Parser | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if file_io is None:
            from ..adapters.file_io.local import LocalFileIO

            file_io = LocalFileIO()
        self._file_io = file_io
        self._cache = cache if cache is not None else ParseCache()
        self._max_workers = max_workers
        self._parser: Parser = parser or parse_content

    @property
    def cache(self) -> ParseCache:
        return self._cache

    def parse_files(
        self,
        file_paths: Iterable[str] | None,
        options: Mapping[str, Any] | ParseOptions | None = None,
    ) -> LoadResult:
        """Parse *file_paths* and return ``LoadResult(results, errors)``.

        Why
        ----
        Callers load every candidate dotenv file of a project at once and need
        a failure in one file to leave the others untouched.

        Parameters
        ----------
        file_paths:
            Paths to load; ``None`` or empty yields two empty mappings.
        options:
            Options mapping (``interpolate``, ``types``, ``custom_types``, ...)
            or :class:`ParseOptions`. Unknown keys are ignored.

        Side Effects
        ------------
        Reads files through the collaborator, updates the cache and emits
        structured log events.
        """

        paths = list(dict.fromkeys(file_paths or ()))
        if not paths:
            return LoadResult({}, {})

        parse_options = ParseOptions.from_mapping(options)
        with batch_trace():
            return self._load(paths, parse_options)

    def _load(self, paths: list[str], options: ParseOptions) -> LoadResult:
        results: dict[str, Mapping[str, VariableRecord]] = {}
        errors: dict[str, str] = {}

        for fetched in self._fetch_all(paths):
            if fetched.error is not None:
                errors[fetched.path] = fetched.error
                log_warning("file_fetch_failed", **make_event("fetch", fetched.path, {"error": fetched.error}))
                continue
            try:
                results[fetched.path] = self._resolve(fetched, options)
            except Exception as exc:  # noqa: BLE001 - one broken file must not sink the batch
                errors[fetched.path] = f"Failed to parse {fetched.path}: {_describe(exc)}"
                log_error("file_parse_failed", **make_event("parse", fetched.path, {"error": repr(exc)}))

        log_info(
            "parse_batch_complete",
            **make_event("load", None, {"files": len(paths), "parsed": len(results), "failed": len(errors)}),
        )
        return LoadResult(results, errors)

    def _resolve(self, fetched: _Fetched, options: ParseOptions) -> Mapping[str, VariableRecord]:
        """Return cached variables when still valid, otherwise parse and store a new entry."""

        cached = self._cache.get(fetched.path)
        if cached is not None and cached.mtime == fetched.mtime and cached.options == options:
            self._cache.record_hit()
            log_debug("cache_hit", **make_event("cache", fetched.path, {"mtime": fetched.mtime}))
            return cached.variables

        self._cache.record_miss()
        log_debug("cache_miss", **make_event("cache", fetched.path, {"mtime": fetched.mtime}))
        lines = list(fetched.lines or ())
        variables = self._parser(fetched.path, lines, options)
        entry = CacheEntry(
            mtime=fetched.mtime if fetched.mtime is not None else 0.0,
            variables=variables,
            content_hash=_content_hash(lines),
            options=options,
        )
        self._cache.put(fetched.path, entry)
        return entry.variables

    def _fetch_all(self, paths: list[str]) -> list[_Fetched]:
        workers = min(self._max_workers, len(paths))
        # One context copy per task; worker log entries carry the batch trace id.
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dotenv-fetch") as pool:
            futures = [pool.submit(copy_context().run, self._fetch_one, path) for path in paths]
            return [future.result() for future in futures]

    def _fetch_one(self, path: str) -> _Fetched:
        """Fetch mtime first, then content, so a concurrent write shows up as a newer mtime next time."""

        try:
            mtime = self._file_io.get_mtime(path)
        except Exception as exc:  # noqa: BLE001 - collaborator failures become per-path errors
            return _Fetched(path, error=_describe(exc))
        if mtime is None:
            return _Fetched(path, error=f"No modification time available for {path}")

        try:
            contents, failures = self._file_io.read_many([path])
        except Exception as exc:  # noqa: BLE001 - collaborator failures become per-path errors
            return _Fetched(path, error=_describe(exc))

        if failures and path in failures:
            return _Fetched(path, error=str(failures[path]))
        if not contents or path not in contents or contents[path] is None:
            return _Fetched(path, error=f"No content returned for {path}")
        return _Fetched(path, mtime=mtime, lines=_as_lines(contents[path]))


def _as_lines(content: Sequence[str] | str) -> Sequence[str]:
    if isinstance(content, str):
        return split_lines(content)
    return content


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _content_hash(lines: Sequence[str]) -> str:
    digest = hashlib.sha256()
    for line in lines:
        digest.update(line.encode("utf-8", "surrogatepass"))
        digest.update(b"\n")
    return digest.hexdigest()
