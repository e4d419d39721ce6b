"""fsdlint CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from fsdlint import __version__

if TYPE_CHECKING:
    from fsdlint.config import ProjectConfig


@click.group()
@click.version_option(version=__version__, prog_name="fsdlint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """fsdlint - architectural conformance checks for Feature-Sliced codebases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


_project_option = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: fsdlint.yml in the project root).",
)


def _load_config_or_exit(project_root: Path, config_path: Path | None) -> ProjectConfig:
    from fsdlint.config import load_config

    try:
        return load_config(project_root, config_path)
    except ValueError as exc:
        click.echo(f"Error: Invalid configuration: {exc}", err=True)
        sys.exit(2)


@main.command()
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@_project_option
@_config_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich for TTY, porcelain otherwise).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the RuleResults JSON (default: from config).",
)
@click.option("--no-output", is_flag=True, help="Do not write the RuleResults JSON file.")
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=1, help="Worker threads.")
@click.option("--strict", is_flag=True, help="Exit 1 when errors are found.")
@click.option("--fail-on-warn", is_flag=True, help="Exit 1 when any violation is found.")
@click.pass_context
def check(
    ctx: click.Context,
    files: tuple[Path, ...],
    *,
    project: Path | None,
    config_path: Path | None,
    fmt: str | None,
    output: Path | None,
    no_output: bool,
    jobs: int,
    strict: bool,
    fail_on_warn: bool,
) -> None:
    """Analyze the project (or only FILES) and report violations.

    Exit codes: 0 = clean or violations without --strict,
    1 = errors with --strict (any violation with --fail-on-warn),
    2 = configuration error.
    """
    from fsdlint.analysis.report import format_json, format_porcelain, format_rich
    from fsdlint.analysis.runner import LintError, analyze, write_results

    project_root = (project or Path.cwd()).resolve()
    config = _load_config_or_exit(project_root, config_path)

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        results = analyze(
            project_root,
            config=config,
            files=[f.resolve() for f in files] or None,
            jobs=jobs,
        )
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if not no_output:
        output_path = output if output is not None else project_root / config.output
        write_results(results, output_path)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    rendered = formatters[fmt](results)
    quiet = ctx.obj.get("quiet", False) if ctx.obj else False
    if rendered and not (quiet and not results.violations):
        click.echo(rendered)

    if fail_on_warn and results.violations:
        sys.exit(1)
    if strict and results.has_errors:
        sys.exit(1)


@main.command()
@_project_option
@_config_option
def layers(*, project: Path | None, config_path: Path | None) -> None:
    """Show the effective layer hierarchy."""
    from rich.console import Console
    from rich.table import Table

    from fsdlint.analysis.layers import LAYER_NAMES, SLICED_LAYERS

    project_root = (project or Path.cwd()).resolve()
    config = _load_config_or_exit(project_root, config_path)

    table = Table(title=f"Layers ({config.source_root}/)")
    table.add_column("layer", style="cyan", no_wrap=True)
    table.add_column("may import", style="green")
    table.add_column("sliced", justify="center")
    for name in LAYER_NAMES:
        allowed = config.hierarchy.allowed_targets(name)
        table.add_row(name, ", ".join(allowed) or "-", "yes" if name in SLICED_LAYERS else "no")

    Console().print(table)


@main.command()
@_project_option
@_config_option
def rules(*, project: Path | None, config_path: Path | None) -> None:
    """List the built-in rules and their effective severities."""
    from rich.console import Console
    from rich.table import Table

    from fsdlint.rules import RULE_CLASSES

    project_root = (project or Path.cwd()).resolve()
    config = _load_config_or_exit(project_root, config_path)

    table = Table(title="Rules")
    table.add_column("rule", style="cyan", no_wrap=True)
    table.add_column("severity")
    table.add_column("description")
    for cls in RULE_CLASSES:
        meta = cls.meta
        settings = config.rule_settings(meta.id)
        severity = settings.severity or meta.severity
        style = {"error": "red", "warning": "yellow"}.get(severity, "dim")
        table.add_row(meta.id, f"[{style}]{severity}[/]", meta.description)

    Console().print(table)
