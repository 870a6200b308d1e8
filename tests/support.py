"""Shared fakes for the test-suite.

``FakeFileIO`` stands in for the filesystem collaborator: tests declare file
contents, modification times and failures up front and inspect call counts
afterwards. ``CountingParser`` wraps the real parser so tests can observe
whether a file was parsed again.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from lib_typed_dotenv.application.file_parser import parse_content
from lib_typed_dotenv.application.line_parser import split_lines
from lib_typed_dotenv.domain.errors import FileAccessError
from lib_typed_dotenv.domain.records import VariableRecord


@dataclass
class FakeFileIO:
    """In-memory implementation of the ``FileIO`` port."""

    files: dict[str, str] = field(default_factory=dict)
    mtimes: dict[str, float] = field(default_factory=dict)
    read_errors: dict[str, str] = field(default_factory=dict)
    mtime_errors: set[str] = field(default_factory=set)
    raise_on_read: set[str] = field(default_factory=set)
    read_calls: list[str] = field(default_factory=list)
    mtime_calls: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def write(self, path: str, content: str, *, mtime: float = 1.0) -> None:
        self.files[path] = content
        self.mtimes[path] = mtime

    def read_many(self, paths: Iterable[str]) -> tuple[dict[str, list[str]], dict[str, str]]:
        contents: dict[str, list[str]] = {}
        errors: dict[str, str] = {}
        for path in paths:
            with self._lock:
                self.read_calls.append(path)
            if path in self.raise_on_read:
                raise OSError(f"collaborator exploded on {path}")
            if path in self.read_errors:
                errors[path] = self.read_errors[path]
            elif path in self.files:
                contents[path] = split_lines(self.files[path])
            else:
                errors[path] = f"File not found: {path}"
        return contents, errors

    def get_mtime(self, path: str) -> float:
        with self._lock:
            self.mtime_calls.append(path)
        if path in self.mtime_errors:
            raise FileAccessError(f"Cannot stat {path}")
        return self.mtimes.get(path, 1.0)


class CountingParser:
    """Wrap :func:`parse_content` and count invocations per path."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, path: str, lines: Sequence[str], options: object) -> Mapping[str, VariableRecord]:
        self.calls.append(path)
        return parse_content(path, lines, options)  # type: ignore[arg-type]

    def count(self, path: str) -> int:
        return self.calls.count(path)
