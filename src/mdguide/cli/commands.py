"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdguide.config import Settings, load_config
from mdguide.core.pipeline import build_docs, write_strings


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(project_dir: Path, overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(project_dir, overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


def build_cmd(
    project_dir: Annotated[Path, typer.Argument(help="Project directory containing config.yaml")] = Path("."),
    mode: Annotated[Optional[str], typer.Option("--mode", help="production or development")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress")] = False,
    ):
    """Build the HTML guide for English and every configured language."""
    _setup_logging(verbose)
    settings = _settings(project_dir, overrides={"mode": mode, "out_dir": out, "parser_config": parser})
    try:
        written = build_docs(settings, project_dir)
    except (ValueError, OSError) as e:
        _fail("Build failed", e)

    if not written:
        typer.echo(f"Build failed; error pages written to {Path(project_dir) / settings.out_dir}/")
        raise typer.Exit(1)
    typer.echo(f"Built {len(written)} file(s) in {Path(project_dir) / settings.out_dir}/")


def strings_cmd(
    project_dir: Annotated[Path, typer.Argument(help="Project directory containing config.yaml")] = Path("."),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress")] = False,
    ):
    """Write localization/en/docs.po with every base-language string."""
    _setup_logging(verbose)
    settings = _settings(project_dir)
    try:
        po_path, count = write_strings(settings, project_dir)
    except (ValueError, OSError) as e:
        _fail("Extracting strings failed", e)
    typer.echo(f"Wrote {count} string(s) to {po_path}")
