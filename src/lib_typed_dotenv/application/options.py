"""Normalised parse options.

Purpose
-------
Translate the loose options bag accepted at the library boundary into a
frozen, hashable :class:`ParseOptions` value. The value doubles as part of the
cache key, so two calls with equal options can share cached results.

Recognised keys
---------------
``interpolate``
    ``bool``; enables interpolation with default settings.
``interpolation``
    Mapping with ``enabled`` plus :class:`InterpolationOptions` fields.
``types``
    ``bool`` or mapping toggling built-in matchers (see
    :func:`lib_typed_dotenv.application.type_registry.build_registry`).
``custom_types``
    Ordered list (or mapping) of custom matcher definitions.

Every other key is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .interpolation import InterpolationOptions
from .type_registry import BUILTIN_TYPE_NAMES, TypeMatcher, TypeRegistry, build_registry


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Frozen view of the options that influence a file's parse result.

    Examples
    --------
    >>> options = ParseOptions.from_mapping({"interpolate": True, "colour": "ignored"})
    >>> options.interpolation is not None
    True
    >>> ParseOptions.from_mapping(None) == ParseOptions()
    True
    """

    interpolation: InterpolationOptions | None = None
    custom_types: tuple[TypeMatcher, ...] = ()
    builtin_types: frozenset[str] = frozenset(BUILTIN_TYPE_NAMES)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | ParseOptions | None) -> ParseOptions:
        """Normalise *options*; an existing :class:`ParseOptions` is returned unchanged."""

        if isinstance(options, ParseOptions):
            return options
        if not options:
            return cls()
        registry = build_registry(options.get("types"), options.get("custom_types"))
        return cls(
            interpolation=_interpolation_options(options),
            custom_types=tuple(matcher for matcher in registry.matchers if not matcher.builtin),
            builtin_types=registry.enabled_builtins,
        )

    def registry(self) -> TypeRegistry:
        """Return a :class:`TypeRegistry` configured like these options."""

        return TypeRegistry(self.custom_types, builtin_types=self.builtin_types)


def _interpolation_options(options: Mapping[str, Any]) -> InterpolationOptions | None:
    for key in ("interpolation", "interpolate"):
        setting = options.get(key)
        if isinstance(setting, Mapping):
            return InterpolationOptions.from_mapping(setting) if setting.get("enabled", True) else None
        if setting is True:
            return InterpolationOptions()
    return None
