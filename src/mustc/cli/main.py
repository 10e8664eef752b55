"""mustc CLI Main Entry Point

Usage:
    mustc compile page.mustache                   # print native code
    mustc compile page.mustache -b script -o page.js
    mustc compile page.mustache -p row=row.mustache --bundle
    mustc runtime script                          # print the JS runtime
    mustc specs path/to/specs --fail-output out/  # run Mustache spec suites
    mustc --version
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from mustc import api
from mustc._version import __version__
from mustc.bundle import bundle as bundle_code
from mustc.cli.errors import handle_error
from mustc.cli.utils import parse_partial_args, setup_logging
from mustc.config import CompileOptions, MustcConfig, WhitespaceMode, load_config
from mustc.exceptions import MustcError
from mustc.runtime import get_runtime_source
from mustc.specs import run_suites

log = logging.getLogger(__name__)

typer_app = typer.Typer(
    help="Mustache template compiler - emits render functions for Python and JavaScript.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mustc {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Mustache template compiler."""


def _resolve_config(
    config_path: Optional[Path],
    partial: Optional[List[str]],
    partials_dir: Optional[Path],
    backend: Optional[str],
    extended: Optional[bool],
    whitespace: Optional[WhitespaceMode],
    compact: Optional[bool],
) -> tuple[MustcConfig, dict[str, str]]:
    """Merge mustc.yaml (if any) with command-line overrides.

    Config-file partials are relative to the config file; command-line
    partials are relative to the working directory and win on name clashes.
    """
    if config_path is not None:
        config = load_config(config_path)
        partials = config.load_partials(config_path.parent)
    else:
        config = MustcConfig()
        partials = {}

    cli_partials = MustcConfig(
        partials=parse_partial_args(partial), partials_dir=partials_dir
    )
    partials.update(cli_partials.load_partials(Path.cwd()))

    option_updates: dict = {}
    if whitespace is not None:
        option_updates["whitespace_mode"] = whitespace
    if compact is not None:
        option_updates["compact_literals"] = compact

    updates: dict = {"options": config.options.model_copy(update=option_updates)}
    if backend is not None:
        updates["backend"] = backend
    if extended is not None:
        updates["extended"] = extended

    return config.model_copy(update=updates), partials


@typer_app.command("compile")
def compile_command(
    template: Path = typer.Argument(..., help="Template file to compile."),
    partial: Optional[List[str]] = typer.Option(
        None, "-p", "--partial", help="Partial as NAME=FILE (repeatable)."
    ),
    partials_dir: Optional[Path] = typer.Option(
        None, "--partials-dir", help="Directory of *.mustache partials."
    ),
    backend: Optional[str] = typer.Option(
        None, "-b", "--backend", help="Target backend: native or script."
    ),
    extended: Optional[bool] = typer.Option(
        None,
        "--extended/--simple",
        help="Emit render(context, section) instead of render(context).",
    ),
    whitespace: Optional[WhitespaceMode] = typer.Option(
        None, "-w", "--whitespace", help="Literal whitespace handling."
    ),
    compact: Optional[bool] = typer.Option(
        None, "--compact/--safe", help="Minimize string literals (not markup-safe)."
    ),
    bundle: bool = typer.Option(
        False, "--bundle", help="Include the runtime to produce a standalone module."
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write code to file instead of stdout."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to mustc.yaml."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Compile a template to render code."""
    setup_logging(verbose)

    try:
        config, partials = _resolve_config(
            config_path, partial, partials_dir, backend, extended, whitespace, compact
        )
        log.info("Compiling %s with %d partial(s)", template, len(partials))

        tree = api.compile(template.read_text(), partials, config.options)
        code = api.generate(
            tree,
            config.backend,
            extended=config.extended,
            function_name=config.function_name,
        )
        if bundle:
            code = bundle_code(
                code,
                config.backend,
                source_name=template.name,
                function_name=config.function_name,
            )
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(code if code.endswith("\n") else code + "\n")
            log.info("Wrote %s", output)
    except (MustcError, OSError) as e:
        handle_error(e)

    if output is None:
        typer.echo(code)


@typer_app.command("runtime")
def runtime_command(
    backend: str = typer.Argument("native", help="Backend: native or script."),
) -> None:
    """Print the runtime source for a backend."""
    try:
        source = get_runtime_source(backend)
    except MustcError as e:
        handle_error(e)
    typer.echo(source, nl=False)


@typer_app.command("specs")
def specs_command(
    directory: Path = typer.Argument(..., help="Directory of spec suite files."),
    fail_output: Optional[Path] = typer.Option(
        None, "--fail-output", help="Directory for per-case failure reports."
    ),
    whitespace: WhitespaceMode = typer.Option(
        WhitespaceMode.STANDALONE, "-w", "--whitespace", help="Literal whitespace handling."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output."),
) -> None:
    """Run Mustache spec suites against the native backend."""
    setup_logging(verbose)

    if not directory.is_dir():
        handle_error(FileNotFoundError(f"Spec directory not found: {directory}"))

    try:
        if fail_output is not None:
            fail_output.mkdir(parents=True, exist_ok=True)
        report = run_suites(
            directory,
            fail_output_dir=fail_output,
            options=CompileOptions(whitespace_mode=whitespace),
        )
    except (MustcError, OSError) as e:
        handle_error(e)

    for case_id in report.failures:
        typer.echo(f"[FAIL] '{case_id}'")
    typer.echo(f"Passed {report.passed}/{report.total} tests!")

    if not report.ok:
        raise typer.Exit(code=1)


def app() -> None:
    """Console-script entry point."""
    typer_app()


if __name__ == "__main__":
    app()
