"""Variable interpolation for dotenv values.

Purpose
-------
Rewrite ``${NAME}`` style references inside raw values into the values they
point at. All raw values of a scope are collected before anything is
substituted, so references may point forwards in the file, and a referenced
value is itself resolved before it is spliced in.

Supported forms
---------------
* ``${NAME}`` – value of ``NAME``, empty when undefined.
* ``${NAME:-default}`` – ``default`` when ``NAME`` is undefined or empty.
* ``${NAME-default}`` – ``default`` only when ``NAME`` is undefined.
* ``${NAME:+alt}`` – ``alt`` when ``NAME`` is defined and non-empty, else empty.
* ``${NAME+alt}`` – ``alt`` when ``NAME`` is defined, else empty.
* ``$NAME`` – only with :attr:`InterpolationOptions.simple_variables`.

Default and alternate text is interpolated too, and may nest ``${...}``.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..observability import log_warning

_NAME = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)(:-|:\+|-|\+)?(.*)$", re.DOTALL)
_SIMPLE_VAR = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_BRACE_NAME = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)")
_ESCAPES = re.compile(r"\\([nrt\"'\\])")
_ESCAPE_MAP = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "'": "'", "\\": "\\"}


@dataclass(frozen=True, slots=True)
class InterpolationOptions:
    """Switches controlling :func:`interpolate`.

    Attributes
    ----------
    simple_variables:
        Also expand the brace-less ``$NAME`` form.
    use_environ:
        Fall back to the process environment for names missing from the scope.
    escapes:
        Decode ``\\n``, ``\\t``, ``\\r``, ``\\\\`` and escaped quotes in the
        literal text of a value; substituted values are left alone.
    warn_on_undefined:
        Log ``interpolation_undefined`` for references to unknown names,
        except those carrying a default (``:-`` / ``-``).
    """

    simple_variables: bool = False
    use_environ: bool = False
    escapes: bool = False
    warn_on_undefined: bool = True

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> InterpolationOptions:
        """Build options from a mapping, ignoring unknown keys.

        A nested ``features`` mapping (``{"features": {"escapes": True}}``)
        is accepted as well.
        """

        if not mapping:
            return cls()
        features = mapping.get("features")
        if not isinstance(features, Mapping):
            features = {}
        return cls(
            simple_variables=bool(mapping.get("simple_variables", False)),
            use_environ=bool(mapping.get("use_environ", False)),
            escapes=bool(mapping.get("escapes", features.get("escapes", False))),
            warn_on_undefined=bool(mapping.get("warn_on_undefined", True)),
        )


def interpolate(
    raw_values: Mapping[str, str],
    options: InterpolationOptions | None = None,
    *,
    literal_keys: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return *raw_values* with every reference resolved.

    Parameters
    ----------
    raw_values:
        All raw values in scope, keyed by variable name.
    options:
        Feature switches; defaults to :class:`InterpolationOptions`.
    literal_keys:
        Keys whose values are taken verbatim (single-quoted values).
    environ:
        Environment used when ``use_environ`` is set; defaults to :data:`os.environ`.

    Examples
    --------
    >>> interpolate({"URL": "http://${HOST}:${PORT:-80}", "HOST": "example.com"})["URL"]
    'http://example.com:80'
    >>> interpolate({"A": "${B}", "B": "${C}/b", "C": "c"})["A"]
    'c/b'
    """

    resolver = _Resolver(
        raw_values,
        options or InterpolationOptions(),
        frozenset(literal_keys),
        os.environ if environ is None else environ,
    )
    resolver.prepare()
    return {key: resolver.resolve(key) for key in raw_values}


_VISITING, _ACYCLIC, _CYCLIC = range(3)


class _Resolver:
    """Resolve keys depth-first, memoising results and breaking reference cycles.

    :meth:`prepare` resolves every key whose references never reach a cycle
    bottom-up with an explicit stack, so long reference chains do not recurse.
    Keys touching a cycle are left to :meth:`resolve` in declaration order.
    """

    def __init__(
        self,
        raw_values: Mapping[str, str],
        options: InterpolationOptions,
        literal_keys: frozenset[str],
        environ: Mapping[str, str],
    ) -> None:
        self._raw = raw_values
        self._options = options
        self._literal = literal_keys
        self._environ = environ
        self._resolved: dict[str, str] = {}
        self._active: list[str] = []

    def prepare(self) -> None:
        marks: dict[str, int] = {}
        for root in self._raw:
            if root in marks:
                continue
            marks[root] = _VISITING
            stack = [(root, iter(self._references(root)))]
            tainted: set[str] = set()
            while stack:
                key, pending = stack[-1]
                name = next(pending, None)
                if name is not None:
                    mark = marks.get(name)
                    if mark is None:
                        marks[name] = _VISITING
                        stack.append((name, iter(self._references(name))))
                    elif mark != _ACYCLIC:
                        tainted.add(key)
                    continue
                stack.pop()
                if key in tainted:
                    marks[key] = _CYCLIC
                    if stack:
                        tainted.add(stack[-1][0])
                else:
                    marks[key] = _ACYCLIC
                    self.resolve(key)

    def _references(self, key: str) -> list[str]:
        """Names in scope that *key* may refer to, defaults and alternates included."""

        if key in self._literal:
            return []
        raw = self._raw[key]
        names = _BRACE_NAME.findall(raw)
        if self._options.simple_variables:
            names.extend(_SIMPLE_VAR.findall(raw))
        return [name for name in dict.fromkeys(names) if name in self._raw]

    def resolve(self, key: str) -> str:
        if key in self._resolved:
            return self._resolved[key]
        raw = self._raw[key]
        if key in self._literal:
            self._resolved[key] = raw
            return raw
        self._active.append(key)
        try:
            value = self.expand(raw)
        finally:
            self._active.pop()
        self._resolved[key] = value
        return value

    def expand(self, text: str) -> str:
        """Substitute every reference found in *text*."""

        pieces: list[str] = []
        cursor = 0
        for start, end, content in _find_brace_references(text):
            pieces.append(self._expand_simple(text[cursor:start]))
            pieces.append(self._substitute(content, text[start:end]))
            cursor = end
        pieces.append(self._expand_simple(text[cursor:]))
        return "".join(pieces)

    def _expand_simple(self, text: str) -> str:
        # Escapes are decoded in literal text only, never in substituted values.
        if self._options.escapes:
            text = _ESCAPES.sub(lambda match: _ESCAPE_MAP[match.group(1)], text)
        if not self._options.simple_variables or "$" not in text:
            return text
        return _SIMPLE_VAR.sub(lambda match: self._lookup(match.group(1)) or "", text)

    def _substitute(self, content: str, original: str) -> str:
        match = _NAME.match(content)
        if not match:
            return original
        name, operator, argument = match.groups()
        if operator is None and argument:
            return original

        value = self._lookup(name, warn=operator not in (":-", "-"))
        if operator == ":-":
            return self.expand(argument) if not value else value
        if operator == "-":
            return self.expand(argument) if value is None else value
        if operator == ":+":
            return self.expand(argument) if value else ""
        if operator == "+":
            return self.expand(argument) if value is not None else ""
        return value or ""

    def _lookup(self, name: str, *, warn: bool = True) -> str | None:
        if name in self._active:
            log_warning("interpolation_cycle", stage="interpolate", path=None, key=name, chain=list(self._active))
            return ""
        if name in self._raw:
            return self.resolve(name)
        value = self._environ.get(name) if self._options.use_environ else None
        if value is None and warn and self._options.warn_on_undefined:
            log_warning("interpolation_undefined", stage="interpolate", path=None, key=name)
        return value


def _find_brace_references(text: str) -> list[tuple[int, int, str]]:
    """Return ``(start, end, inner)`` for every balanced ``${...}`` in *text*.

    Examples
    --------
    >>> _find_brace_references("a${X:-${Y}}b")
    [(1, 11, 'X:-${Y}')]
    """

    found: list[tuple[int, int, str]] = []
    index = text.find("${")
    while index >= 0:
        depth = 1
        cursor = index + 2
        while cursor < len(text) and depth:
            char = text[cursor]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            cursor += 1
        if depth:
            index = text.find("${", index + 2)
            continue
        found.append((index, cursor, text[index + 2 : cursor - 1]))
        index = text.find("${", cursor)
    return found
