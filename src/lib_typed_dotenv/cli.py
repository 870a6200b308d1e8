"""CLI adapter for ``lib_typed_dotenv`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect how dotenv files are parsed and typed without writing
Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_parse` – parses dotenv files and prints the result as JSON.
* :func:`cli_detect_type` – classifies a single value.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer and only talks to :mod:`lib_typed_dotenv.core`.
``lib_cli_exit_tools`` centralises the exit code strategy so all commands
behave consistently across shells and CI.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import detect_type, load_matcher_file, parse_files

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_typed_dotenv"


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is missing."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed dotenv parser with interpolation and cached parallel loading",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_typed_dotenv version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo("lib_typed_dotenv (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("parse", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--interpolate/--no-interpolate",
    default=False,
    help="Resolve ${NAME} references between variables of the same file",
)
@click.option(
    "--types-file",
    type=click.Path(path_type=Path, exists=True, dir_okay=False, readable=True),
    default=None,
    help="TOML/JSON/YAML file with custom type definitions",
)
@click.option("--no-types", is_flag=True, default=False, help="Disable the built-in type matchers")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.pass_context
def cli_parse(
    ctx: click.Context,
    files: Sequence[Path],
    interpolate: bool,
    types_file: Optional[Path],
    no_types: bool,
    indent: Optional[int],
) -> None:
    """Parse FILES and print ``{"results": ..., "errors": ...}`` as JSON.

    Exits with status 1 when any file could not be read.
    """

    options = _build_options(types_file, interpolate=interpolate, no_types=no_types)
    results, errors = parse_files([str(path) for path in files], options)
    payload = {
        "results": {
            path: {key: record.to_dict() for key, record in variables.items()}
            for path, variables in results.items()
        },
        "errors": errors,
    }
    click.echo(json.dumps(payload, indent=indent, ensure_ascii=False))
    if errors:
        ctx.exit(1)


@cli.command("detect-type", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("value")
@click.option(
    "--types-file",
    type=click.Path(path_type=Path, exists=True, dir_okay=False, readable=True),
    default=None,
    help="TOML/JSON/YAML file with custom type definitions",
)
def cli_detect_type(value: str, types_file: Optional[Path]) -> None:
    """Print the detected type and canonical value of VALUE, tab separated.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["detect-type", "YES"])
    >>> result.output
    'boolean\\ttrue\\n'
    """

    type_name, canonical = detect_type(value, _build_options(types_file))
    click.echo(f"{type_name}\t{canonical}")


def _build_options(types_file: Optional[Path], *, interpolate: bool = False, no_types: bool = False) -> dict[str, Any]:
    """Assemble the options mapping from CLI flags and an optional definition file."""

    options: dict[str, Any] = load_matcher_file(types_file) if types_file is not None else {}
    if interpolate:
        options["interpolate"] = True
    if no_types:
        options["types"] = False
    return options


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
