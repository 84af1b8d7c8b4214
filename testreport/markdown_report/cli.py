"""CLI entry point for the Markdown test report generator."""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from testreport.markdown_report.aggregator import aggregate
from testreport.markdown_report.git_info import get_git_info, get_job_url
from testreport.markdown_report.models.report_config import GitInfo, ReportConfig
from testreport.markdown_report.parser import read_events
from testreport.markdown_report.renderer import render_report

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
STDOUT = "-"

app = typer.Typer(add_completion=False)


def get_log_level(quiet: bool, verbose: int) -> int:
    """Map the quiet and verbose flags to a logging level."""
    if quiet:
        return logging.CRITICAL + 1
    if verbose == 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def default_output_path(input_path: Path) -> Path:
    """Report file name used when no output is given: the input stem plus .md."""
    return Path(f"{input_path.stem}.md")


@app.command()
def main(
    input_path: Path = typer.Argument(  # noqa: B008
        Path("test-output.json"),
        metavar="INPUT",
        help="JSON test output. Lines that are not test events are ignored",
    ),
    output: Optional[str] = typer.Option(  # noqa: UP007
        None,
        "--output",
        "-o",
        help="Report file name, '-' for stdout [default: <input stem>.md]",
    ),
    no_front_matter: bool = typer.Option(
        False, "--no-front-matter", "-d", help="Disable report metadata"
    ),
    summary: bool = typer.Option(
        False, "--summary", "-s", help="Show only the summary section"
    ),
    git: Optional[Path] = typer.Option(  # noqa: UP007
        None, "--git", "-g", help="Git top-level location [default: .]"
    ),
    no_git: bool = typer.Option(
        False, "--no-git", "-n", help="Disable extracting git information"
    ),
    title: str = typer.Option("Test Result", "--title", help="Report title"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Be quiet"),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Be more verbose. May be repeated multiple times",
    ),
) -> None:
    """Convert JSON test output into a Markdown report."""
    if quiet and verbose:
        raise typer.BadParameter("--quiet cannot be combined with --verbose")
    if no_git and git is not None:
        raise typer.BadParameter("--no-git cannot be combined with --git")

    logging.basicConfig(
        level=get_log_level(quiet, verbose),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    output_name = output or str(default_output_path(input_path))
    logger.info(f"Reading from: {input_path}")
    logger.info(f"Writing to: {output_name}")

    git_info: GitInfo | None = None
    if not no_git:
        git_path = git if git is not None else Path(".")
        git_info = get_git_info(git_path)
        if git_info is None and git is not None:
            logger.warning(f"Unable to read git information from {git_path}")

    try:
        run = aggregate(read_events(input_path))
    except OSError as e:
        logger.error(f"Failed to read input: {e}")
        typer.echo(f"Error: unable to read {input_path}: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(
        f"Collected {len(run.tests)} tests, suite {run.summary.outcome.value}"
    )

    config = ReportConfig(
        generated_at=datetime.now(timezone.utc),
        include_front_matter=not no_front_matter,
        summary_only=summary,
        git_info=git_info,
        job_url=get_job_url(os.environ),
        title=title,
    )
    report = render_report(run, config)

    if output_name == STDOUT:
        typer.echo(report, nl=False)
        return

    try:
        Path(output_name).write_text(report, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write report: {e}")
        typer.echo(f"Error: unable to write {output_name}: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"Report written to {output_name}")


if __name__ == "__main__":  # pragma: no cover
    app()
