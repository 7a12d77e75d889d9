"""Codegen CLI interface.

Commands:
- generate: Render every output of a project
- check: Validate includes, inputs and templates without writing files
- preview: Print a single output's render to stdout

Global options:
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from codegen import __version__
from codegen.config import GeneratorOptions, load_project
from codegen.errors import BatchError, CodegenError
from codegen.models import ProjectDescriptor
from codegen.pipeline import GenerationPipeline
from codegen.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="codegen",
    help="Batch document generator for Jinja2 templates and JSON data",
    add_completion=False,
    no_args_is_help=True,
)

_logger = get_logger()

ProjectOption = Annotated[
    Path | None,
    typer.Option(
        "--project",
        "-p",
        help="Project file (default: codegen.json, codegen.yaml or codegen.proj in cwd)",
        dir_okay=False,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"codegen {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Emit JSON log lines"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """codegen - merge shared template fragments with per-output templates and data."""
    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)


def _fail(error: CodegenError) -> typer.Exit:
    """Report a fatal error as the last line of output."""
    _logger.structured(logging.ERROR, f"ERROR: {error}", **error.to_dict())
    return typer.Exit(1)


def _load(project: Path | None) -> tuple[ProjectDescriptor, GeneratorOptions]:
    try:
        descriptor, options = load_project(project)
    except CodegenError as e:
        raise _fail(e)

    if descriptor.source:
        _logger.debug(f"Loaded project from: {descriptor.source}")
    return descriptor, options


# =============================================================================
# generate command
# =============================================================================


@app.command()
def generate(
    project: ProjectOption = None,
    keep_going: Annotated[
        bool,
        typer.Option("--keep-going", "-k", help="Attempt every output and report all failures"),
    ] = False,
    atomic: Annotated[
        bool,
        typer.Option(
            "--atomic",
            help="Write through a temp file so failed renders leave outputs untouched",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on undefined template variables"),
    ] = False,
    make_dirs: Annotated[
        bool,
        typer.Option("--make-dirs", help="Create missing output directories"),
    ] = False,
) -> None:
    """Render every output of a project.

    Exit codes:
        0: All outputs written
        1: A project, include, input, template or render error occurred
    """
    descriptor, options = _load(project)
    options = options.with_overrides(
        atomic_writes=True if atomic else None,
        strict_undefined=True if strict else None,
        make_dirs=True if make_dirs else None,
        fail_fast=False if keep_going else None,
    )

    pipeline = GenerationPipeline(options)

    try:
        result = pipeline.run(descriptor)
    except BatchError as e:
        _logger.info(f"{len(e.completed)} output(s) written before failures")
        raise _fail(e)
    except CodegenError as e:
        raise _fail(e)

    _logger.structured(
        logging.INFO,
        f"Generated {len(result.completed)} output(s)",
        outputs=[str(path) for path in result.completed],
    )


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(project: ProjectOption = None) -> None:
    """Validate a project without writing any output.

    Parses include files, decodes every input and parses every output
    template, stopping at the first failure.
    """
    descriptor, options = _load(project)

    try:
        count = GenerationPipeline(options).check(descriptor)
    except CodegenError as e:
        raise _fail(e)

    typer.echo(f"✅ Project is valid: {count} output(s) checked")


# =============================================================================
# preview command
# =============================================================================


@app.command()
def preview(
    project: ProjectOption = None,
    index: Annotated[
        int,
        typer.Option("--index", "-i", help="Zero-based position of the output to render"),
    ] = 0,
) -> None:
    """Render one output to stdout without writing its file."""
    descriptor, options = _load(project)

    try:
        content = GenerationPipeline(options).preview(descriptor, index)
    except CodegenError as e:
        raise _fail(e)

    typer.echo(content, nl=False)


if __name__ == "__main__":
    app()
