"""Continuation-aware dotenv line parser.

Purpose
-------
Turn one raw line plus the current :class:`ContinuationState` into either a
completed assignment or an updated state. Multi-line values come in two
flavours:

* ``quoted`` – an opening ``"``/``'`` without its closing partner; fragments
  are joined with newlines once the closing quote is seen.
* ``backslash`` – a trailing unescaped ``\\``; fragments are concatenated
  without separators once a line no longer ends in a backslash.

Contents
--------
* :class:`ParsedLine` – result tuple of :func:`parse_line`.
* :func:`parse_line` – the state machine step.
* :func:`iter_assignments` – drives :func:`parse_line` over a whole file.
* :func:`split_lines` – splits file content into physical lines.

System Role
-----------
Used by :mod:`lib_typed_dotenv.application.file_parser`. Malformed lines never
raise; they are skipped and reported through debug logging only.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, NamedTuple

from ..domain.records import IDLE, ContinuationState
from ..observability import log_debug

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
_TRAILING_COMMENT = re.compile(r"^\s*#\s*(.*?)\s*$")
_QUOTES = frozenset({'"', "'"})


class ParsedLine(NamedTuple):
    """Outcome of a single :func:`parse_line` call.

    ``key`` and ``value`` are ``None`` unless an assignment completed on this
    line. ``state`` is the continuation state to hand to the next call.
    """

    key: str | None
    value: str | None
    comment: str | None
    quote_char: str | None
    state: ContinuationState


class Assignment(NamedTuple):
    """A completed assignment together with the line on which it ended."""

    key: str
    value: str
    comment: str | None
    quote_char: str | None
    line_number: int


_NOTHING = ParsedLine(None, None, None, None, IDLE)


def parse_line(raw_line: str, state: ContinuationState | None = None) -> ParsedLine:
    """Advance the parser by one line.

    Parameters
    ----------
    raw_line:
        One line of the file, with or without its line terminator.
    state:
        Continuation state returned by the previous call, or ``None``.

    Returns
    -------
    ParsedLine
        Completed assignment fields (or ``None``) plus the next state.

    Examples
    --------
    >>> parse_line("KEY1=value1")[:4]
    ('KEY1', 'value1', None, None)
    >>> first = parse_line('KEY="start')
    >>> first.key is None, first.state.continuation_type
    (True, 'quoted')
    >>> parse_line('end"', first.state)[:4]
    ('KEY', 'start\\nend', None, '"')
    """

    line = raw_line.rstrip("\r\n")
    if state is not None and state.in_multi_line:
        if state.continuation_type == "quoted":
            return _continue_quoted(line, state)
        return _continue_backslash(line, state)
    return _parse_idle(line)


def iter_assignments(lines: Iterable[str], *, path: str | None = None) -> Iterator[Assignment]:
    """Yield every completed assignment found in *lines*, in file order.

    An unterminated backslash continuation at the end of input is flushed as a
    complete value; an unterminated quoted value is dropped.

    Examples
    --------
    >>> [a.key for a in iter_assignments(["A=1", "# note", "B=two \\\\", "parts"])]
    ['A', 'B']
    """

    state = IDLE
    line_number = 0
    for line_number, raw_line in enumerate(lines, start=1):
        parsed = parse_line(raw_line, state)
        state = parsed.state
        if parsed.key is not None and parsed.value is not None:
            yield Assignment(parsed.key, parsed.value, parsed.comment, parsed.quote_char, line_number)

    if not state.in_multi_line:
        return
    if state.continuation_type == "backslash":
        yield Assignment(state.key or "", "".join(state.value_lines), None, None, line_number)
    else:
        log_debug("dotenv_unterminated_quote", stage="parse", path=path, key=state.key, line=line_number)


def split_lines(text: str) -> list[str]:
    """Split file content on ``\\n`` only, dropping a trailing ``\\r`` per line.

    Unicode separators such as ``\\u2028`` or form feeds stay inside values.

    Examples
    --------
    >>> split_lines("A=1\\r\\nB=x\\u2028y\\n")
    ['A=1', 'B=x\\u2028y']
    >>> split_lines("")
    []
    """

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_idle(line: str) -> ParsedLine:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return _NOTHING

    eq_pos = _find_unescaped(stripped, "=")
    if eq_pos < 0:
        log_debug("dotenv_line_skipped", stage="parse", reason="missing_equals")
        return _NOTHING

    key = stripped[:eq_pos].strip()
    if not _KEY_PATTERN.match(key):
        log_debug("dotenv_line_skipped", stage="parse", reason="invalid_key")
        return _NOTHING

    value = stripped[eq_pos + 1 :].strip()
    if value[:1] in _QUOTES:
        return _parse_quoted(key, value)
    if _ends_with_continuation(value):
        state = ContinuationState(
            in_multi_line=True,
            key=key,
            value_lines=(_strip_continuation(value),),
            continuation_type="backslash",
        )
        return ParsedLine(None, None, None, None, state)
    return _parse_unquoted(key, value)


def _parse_quoted(key: str, value: str) -> ParsedLine:
    """Handle a value opening with a quote: either a full quoted value or a continuation start."""

    quote = value[0]
    closing = _find_unescaped(value, quote, start=1)
    if closing < 0:
        state = ContinuationState(
            in_multi_line=True,
            key=key,
            value_lines=(value[1:],),
            continuation_type="quoted",
            quote_char=quote,
        )
        return ParsedLine(None, None, None, None, state)

    rest = value[closing + 1 :]
    comment_match = _TRAILING_COMMENT.match(rest)
    comment = comment_match.group(1) if comment_match else None
    return ParsedLine(key, value[1:closing], comment, quote, IDLE)


def _parse_unquoted(key: str, value: str) -> ParsedLine:
    # '#' opens a comment only after whitespace, so '#fff' stays a value.
    for index, char in enumerate(value):
        if char == "#" and index > 0 and value[index - 1].isspace():
            comment = value[index + 1 :].strip()
            return ParsedLine(key, value[:index].strip(), comment, None, IDLE)
    return ParsedLine(key, value, None, None, IDLE)


def _continue_quoted(line: str, state: ContinuationState) -> ParsedLine:
    trimmed = line.rstrip()
    quote = state.quote_char or '"'
    if trimmed.endswith(quote) and not _is_escaped(trimmed, len(trimmed) - 1):
        fragments = (*state.value_lines, trimmed[:-1])
        return ParsedLine(state.key, "\n".join(fragments), None, quote, IDLE)
    return ParsedLine(None, None, None, None, state.append(line))


def _continue_backslash(line: str, state: ContinuationState) -> ParsedLine:
    if _ends_with_continuation(line):
        return ParsedLine(None, None, None, None, state.append(_strip_continuation(line)))
    fragments = (*state.value_lines, line)
    return ParsedLine(state.key, "".join(fragments), None, None, IDLE)


def _ends_with_continuation(text: str) -> bool:
    """Return ``True`` when *text* ends in an odd run of backslashes."""

    trimmed = text.rstrip()
    run = len(trimmed) - len(trimmed.rstrip("\\"))
    return run % 2 == 1


def _strip_continuation(text: str) -> str:
    return text.rstrip()[:-1]


def _find_unescaped(text: str, char: str, *, start: int = 0) -> int:
    """Return the index of the first *char* at or after *start* not preceded by a backslash, else ``-1``."""

    index = text.find(char, start)
    while index >= 0:
        if not _is_escaped(text, index):
            return index
        index = text.find(char, index + 1)
    return -1


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == "\\":
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1
