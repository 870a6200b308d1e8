"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by adapters, the composition root and
consuming applications. Expected failures (unreadable files, malformed lines)
never cross the :func:`lib_typed_dotenv.core.parse_files` boundary as
exceptions; these types exist for the places that do raise: the local file
collaborator, the matcher-definition loaders and the single-file convenience
API.

Contents
--------
* :class:`EnvTypesError` – umbrella base class.
* :class:`InvalidFormat` – malformed matcher definitions or definition files.
* :class:`NotFound` – a requested optional resource does not exist.
* :class:`FileAccessError` – stat/read failures on a dotenv file.
"""

from __future__ import annotations


class EnvTypesError(Exception):
    """Base type for all exceptions emitted by ``lib_typed_dotenv``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class InvalidFormat(EnvTypesError):
    """Raised when a matcher definition (or the file holding it) cannot be understood.

    Typical Sources
    ---------------
    :meth:`lib_typed_dotenv.application.type_registry.TypeMatcher.from_definition` and
    the structured loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`).
    """


class NotFound(EnvTypesError):
    """Represents a missing resource such as an absent matcher-definition file."""


class FileAccessError(EnvTypesError):
    """Raised when a dotenv file cannot be stat'ed or read.

    The loader converts it into an entry of the per-path ``errors`` mapping, so
    callers of ``parse_files`` only see it through
    :func:`lib_typed_dotenv.core.load_env_file`.
    """
