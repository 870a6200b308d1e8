"""Public package surface for ``lib_typed_dotenv``.

Re-exports the composition-root helpers, the record and error types, and the
logging hooks so applications can ``import lib_typed_dotenv`` and stay clear of
the internal layering.
"""

from __future__ import annotations

from .application.cache import ParseCache
from .application.interpolation import InterpolationOptions, interpolate
from .application.loader import EnvFileLoader, LoadResult
from .application.options import ParseOptions
from .application.type_registry import TypeMatcher, TypeRegistry, build_registry
from .core import (
    cache_stats,
    clear_cache,
    default_loader,
    detect_type,
    load_env_file,
    load_matcher_file,
    parse_files,
)
from .domain.errors import EnvTypesError, FileAccessError, InvalidFormat, NotFound
from .domain.records import VariableRecord
from .observability import bind_trace_id, get_logger

__all__ = [
    "EnvFileLoader",
    "EnvTypesError",
    "FileAccessError",
    "InterpolationOptions",
    "InvalidFormat",
    "LoadResult",
    "NotFound",
    "ParseCache",
    "ParseOptions",
    "TypeMatcher",
    "TypeRegistry",
    "VariableRecord",
    "bind_trace_id",
    "build_registry",
    "cache_stats",
    "clear_cache",
    "default_loader",
    "detect_type",
    "get_logger",
    "interpolate",
    "load_env_file",
    "load_matcher_file",
    "parse_files",
]
