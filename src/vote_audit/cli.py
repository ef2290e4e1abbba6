"""Typer CLI entrypoint for vote_audit."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml

from vote_audit.config import AppSettings, load_settings
from vote_audit.ingest.read_log import InputUnavailableError
from vote_audit.logging_utils import configure_logging
from vote_audit.pipeline import run_analysis
from vote_audit.report import format_report

app = typer.Typer(
    add_completion=False,
    help="vote_audit command line interface.",
    no_args_is_help=True,
)


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(config_file=config_file)
    if configure:
        logger = configure_logging(settings.paths.logs_root / "vote_audit.log")
    else:
        logger = logging.getLogger("vote_audit")
    return settings, logger


@app.command("show-config")
def show_config(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("analyze")
def analyze_cmd(
    input_file: Path | None = typer.Argument(
        None,
        help="Vote log to analyze. Defaults to paths.input_file from settings.",
        dir_okay=False,
    ),
    output_json: Path | None = typer.Option(
        None,
        "--output-json",
        help="Optional path for the JSON run summary.",
        dir_okay=False,
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Screen a vote log for manipulation and print the cleaned ranking."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    try:
        result = run_analysis(settings, input_file=input_file, output_json=output_json, logger=logger)
    except InputUnavailableError as exc:
        logger.error("analyze.input_unavailable error=%s", exc)
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    typer.echo(format_report(result.analysis), nl=False)
    if result.summary_path is not None:
        typer.echo(f"\nsummary_path: {result.summary_path}")


if __name__ == "__main__":
    app()
