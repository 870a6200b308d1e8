"""Matcher-definition file loaders.

Purpose
-------
Read custom type definitions kept beside a project (``dotenv-types.toml``,
``.json`` or ``.yaml``) and turn them into the options mapping accepted by
:func:`lib_typed_dotenv.core.parse_files`.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`TOMLFileLoader`, :class:`JSONFileLoader`, :class:`YAMLFileLoader` –
  one loader per format.
* :func:`load_matcher_file` – pick a loader by suffix and extract the
  ``types``/``custom_types`` options.

File shape
----------
.. code-block:: toml

    [types]
    ipv4 = false

    [custom_types.semver]
    pattern = '^\\d+\\.\\d+\\.\\d+$'
    transform = "strip"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[assignment]

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

OPTION_KEYS = ("types", "custom_types")


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"[types]")
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:3]
        b'[ty'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Type definition file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("matcher_file_read", stage="config", path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"types": {}}, path="demo")
        {'types': {}}
        >>> BaseFileLoader._ensure_mapping([1], path="demo")
        Traceback (most recent call last):
        ...
        lib_typed_dotenv.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        return data  # type: ignore[return-value]


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:  # type: ignore[attr-defined]
            log_error("matcher_file_invalid", stage="config", path=path, format="toml", error=str(exc))
            raise InvalidFormat(f"Invalid TOML in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("matcher_file_loaded", stage="config", path=path, format="toml")
        return result


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log_error("matcher_file_invalid", stage="config", path=path, format="json", error=str(exc))
            raise InvalidFormat(f"Invalid JSON in {path}: {exc}") from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("matcher_file_loaded", stage="config", path=path, format="json")
        return result


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents when PyYAML is available.

    Raises
    ------
    NotFound
        When PyYAML is not installed.
    """

    def load(self, path: str) -> Mapping[str, object]:
        if yaml is None:
            raise NotFound("PyYAML is required for YAML type definition files")
        try:
            data = yaml.safe_load(self._read(path))  # type: ignore[operator]
        except yaml.YAMLError as exc:  # type: ignore[attr-defined]
            log_error("matcher_file_invalid", stage="config", path=path, format="yaml", error=str(exc))
            raise InvalidFormat(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, path=path)
        log_debug("matcher_file_loaded", stage="config", path=path, format="yaml")
        return result


_LOADERS: Mapping[str, type[BaseFileLoader]] = {
    ".toml": TOMLFileLoader,
    ".json": JSONFileLoader,
    ".yaml": YAMLFileLoader,
    ".yml": YAMLFileLoader,
}


def load_matcher_file(path: str | Path) -> dict[str, Any]:
    """Return the ``types``/``custom_types`` options stored in *path*.

    Why
    ----
    Teams share custom type rules between editors and CI; a definition file
    keeps them out of code.

    Parameters
    ----------
    path:
        TOML, JSON or YAML document. The format follows the suffix.

    Returns
    -------
    dict[str, Any]
        Options mapping holding only the recognised keys that are present.

    Raises
    ------
    NotFound
        The file does not exist.
    InvalidFormat
        Unknown suffix, unparsable content or option values of the wrong shape.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / 'types.json'
    >>> _ = target.write_text('{"types": {"ipv4": false}, "other": 1}', encoding='utf-8')
    >>> load_matcher_file(target)
    {'types': {'ipv4': False}}
    >>> tmp.cleanup()
    """

    path_str = str(path)
    suffix = Path(path_str).suffix.lower()
    loader_type = _LOADERS.get(suffix)
    if loader_type is None:
        raise InvalidFormat(f"Unsupported type definition format {suffix or '<none>'!r} for {path_str}")
    data = loader_type().load(path_str)  # type: ignore[attr-defined]

    options: dict[str, Any] = {}
    for key in OPTION_KEYS:
        if key not in data:
            continue
        value = data[key]
        if key == "types" and isinstance(value, bool):
            options[key] = value
        elif isinstance(value, Mapping) or (key == "custom_types" and isinstance(value, list)):
            options[key] = value
        else:
            raise InvalidFormat(f"'{key}' in {path_str} must be a table or list, got {type(value).__name__}")
    return options
