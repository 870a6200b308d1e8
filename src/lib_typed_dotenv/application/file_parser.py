"""File parse orchestrator.

Purpose
-------
Turn the lines of one dotenv file into ``{key: VariableRecord}``: run the line
parser over every line, resolve interpolation references when enabled, detect
each value's type and attach source metadata.

System Role
-----------
Invoked by :class:`lib_typed_dotenv.application.loader.EnvFileLoader` for files
whose cached result is missing or stale. Pure apart from logging, so it can be
called directly on in-memory content.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Sequence

from ..domain.records import VariableRecord
from ..observability import log_debug
from .interpolation import interpolate
from .line_parser import Assignment, iter_assignments
from .options import ParseOptions
from .type_registry import TypeRegistry


def parse_content(
    path: str,
    lines: Sequence[str],
    options: ParseOptions | Mapping[str, Any] | None = None,
    *,
    registry: TypeRegistry | None = None,
) -> dict[str, VariableRecord]:
    """Parse *lines* (the content of *path*) into variable records.

    Parameters
    ----------
    path:
        Source path recorded on every record.
    lines:
        File content, one entry per line.
    options:
        :class:`ParseOptions` or an options mapping.
    registry:
        Registry to use instead of the one described by *options*.

    Returns
    -------
    dict[str, VariableRecord]
        Records keyed by variable name; later duplicates win.

    Examples
    --------
    >>> records = parse_content("/app/.env", ["PORT=8080", "HOST=localhost # dev"])
    >>> records["PORT"].type, records["HOST"].comment
    ('number', 'dev')
    >>> parse_content("/app/.env", ["A=${B}", "B=1"], {"interpolate": True})["A"].value
    'true'
    """

    parse_options = ParseOptions.from_mapping(options)
    active_registry = registry or parse_options.registry()

    assignments: dict[str, Assignment] = {}
    for assignment in iter_assignments(lines, path=path):
        assignments.pop(assignment.key, None)
        assignments[assignment.key] = assignment

    raw_values = {key: assignment.value for key, assignment in assignments.items()}
    if parse_options.interpolation is not None:
        literal_keys = [key for key, assignment in assignments.items() if assignment.quote_char == "'"]
        resolved = interpolate(raw_values, parse_options.interpolation, literal_keys=literal_keys)
    else:
        resolved = raw_values

    source_file = os.path.basename(path)
    records: dict[str, VariableRecord] = {}
    for key, assignment in assignments.items():
        display = resolved[key]
        type_name, value = active_registry.detect_type(display)
        records[key] = VariableRecord(
            key=key,
            value=value,
            type=type_name,
            display_value=display,
            raw_value=assignment.value,
            comment=assignment.comment,
            quote_char=assignment.quote_char,
            source=path,
            source_file=source_file,
        )

    log_debug("dotenv_parsed", stage="parse", path=path, lines=len(lines), keys=len(records))
    return records
