"""Domain value objects produced and threaded through the parsing pipeline.

Purpose
-------
Hold the immutable records that flow between the line parser, the file
orchestrator and the cache. Nothing here performs I/O.

Contents
--------
* :class:`VariableRecord` – one resolved, typed, source-attributed variable.
* :class:`ContinuationState` – parser progress carried across line boundaries.
* :data:`IDLE` – the shared idle continuation state.
* :class:`CacheEntry` – per-file cached parse result.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

ContinuationType = Literal["quoted", "backslash"]


@dataclass(frozen=True, slots=True)
class VariableRecord:
    """A single variable parsed from a dotenv file.

    Why
    ----
    Downstream tooling (completion, peek, linting) needs the resolved value,
    its inferred type and where it came from in one immutable object.

    Attributes
    ----------
    key:
        Variable name, unique within its file.
    value:
        Canonical value. Equals :attr:`display_value` unless the detected type
        rewrote it (``yes`` becomes ``true`` for booleans).
    type:
        Detected type name (``"string"``, ``"url"``, a custom name, ...).
    display_value:
        Resolved value before any type transform.
    raw_value:
        Value as written in the file, before interpolation.
    comment / quote_char:
        Inline comment and opening quote, when present.
    source / source_file:
        Originating path and its basename.

    Examples
    --------
    >>> record = VariableRecord(key="DEBUG", value="true", type="boolean", source="/app/.env")
    >>> record.source_file, record.display_value
    ('.env', 'true')
    """

    key: str
    value: str
    type: str = "string"
    display_value: str | None = None
    raw_value: str | None = None
    comment: str | None = None
    quote_char: str | None = None
    source: str = ""
    source_file: str = field(default="")

    def __post_init__(self) -> None:
        if self.display_value is None:
            object.__setattr__(self, "display_value", self.value)
        if self.raw_value is None:
            object.__setattr__(self, "raw_value", self.display_value)
        if not self.source_file:
            object.__setattr__(self, "source_file", os.path.basename(self.source))

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` suitable for JSON serialisation."""

        return {
            "key": self.key,
            "value": self.value,
            "type": self.type,
            "display_value": self.display_value,
            "raw_value": self.raw_value,
            "comment": self.comment,
            "quote_char": self.quote_char,
            "source": self.source,
            "source_file": self.source_file,
        }


@dataclass(frozen=True, slots=True)
class ContinuationState:
    """Parser progress for a value spanning several lines.

    The state is a plain value: :func:`lib_typed_dotenv.application.line_parser.parse_line`
    receives one and returns a new one, so a single line can be parsed in
    isolation by handing it any state.

    Invariant: ``in_multi_line`` implies ``key`` and ``continuation_type`` are set.
    """

    in_multi_line: bool = False
    key: str | None = None
    value_lines: tuple[str, ...] = ()
    continuation_type: ContinuationType | None = None
    quote_char: str | None = None

    def __post_init__(self) -> None:
        if self.in_multi_line and (not self.key or self.continuation_type is None):
            raise ValueError("an active continuation requires a key and a continuation type")

    def append(self, fragment: str) -> ContinuationState:
        """Return a copy with *fragment* appended to :attr:`value_lines`."""

        return ContinuationState(
            in_multi_line=True,
            key=self.key,
            value_lines=(*self.value_lines, fragment),
            continuation_type=self.continuation_type,
            quote_char=self.quote_char,
        )


IDLE = ContinuationState()
"""Idle continuation state shared by every parse."""


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached parse result for one file.

    ``variables`` is wrapped in a read-only proxy so an entry handed out to one
    caller can never be edited underneath another. ``options`` records the
    parse options the entry was built with; an entry only satisfies requests
    made with equal options.
    """

    mtime: float
    variables: Mapping[str, VariableRecord]
    content_hash: str | None = None
    options: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
