"""Render a TestRun as a Markdown document."""

import html
from collections.abc import Iterable, Iterator
from datetime import timezone

import yaml

from testreport.markdown_report.models.report_config import GitInfo, ReportConfig
from testreport.markdown_report.models.test_run import TestRecord, TestRun

EXCERPT_SEPARATOR = "<!--more-->"
MISSING_VALUE = "-"


def render_report(run: TestRun, config: ReportConfig) -> str:
    """Render the complete report.

    Args:
        run: Aggregated test run
        config: Rendering options, including the generation timestamp

    Returns:
        Markdown text; identical inputs always give identical output

    """
    return "".join(iter_report(run, config))


def iter_report(run: TestRun, config: ReportConfig) -> Iterator[str]:
    """Yield the report section by section."""
    if config.include_front_matter:
        yield _render_front_matter(run, config)

    yield _render_summary(run)

    if config.git_info is not None:
        yield _render_git(config.git_info)

    if config.job_url:
        yield f"**Job:** [{config.job_url}]({config.job_url})\n\n"

    if not config.summary_only:
        yield _render_index(run)
        yield from _render_details(run)


def format_elapsed(seconds: float | None) -> str:
    """Format an elapsed time with fixed precision, or a placeholder if unknown."""
    if seconds is None:
        return MISSING_VALUE
    return f"{seconds:.3f}s"


def make_anchor(heading: str) -> str:
    """Build the link fragment a Markdown renderer assigns to a heading.

    Keeps letters, digits and underscores, turns runs of spaces and dashes
    into a single dash, and drops everything else.
    """
    chars: list[str] = []
    was_dash = False
    for c in heading:
        if c == "_":
            chars.append(c)
            was_dash = False
        elif c in (" ", "-"):
            if not was_dash:
                chars.append("-")
                was_dash = True
        elif c.isalnum():
            chars.append(c.lower())
            was_dash = False
    return "".join(chars)


def _escape_text(text: str) -> str:
    """Backslash-escape characters that would start a link or raw HTML."""
    for c in ("\\", "[", "]", "<"):
        text = text.replace(c, f"\\{c}")
    return text


def _escape_cell(text: str) -> str:
    return _escape_text(text).replace("|", "\\|").replace("\n", " ")


def _heading(record: TestRecord) -> str:
    return f"{record.outcome.symbol} {record.name}"


def _heading_anchors(tests: Iterable[TestRecord]) -> list[str]:
    """Anchors for the detail headings, numbering repeats as renderers do.

    The second heading with the same slug gets ``-1``, the third ``-2``.
    """
    seen: dict[str, int] = {}
    anchors: list[str] = []
    for record in tests:
        anchor = make_anchor(_heading(record))
        count = seen.get(anchor, 0)
        seen[anchor] = count + 1
        anchors.append(f"{anchor}-{count}" if count else anchor)
    return anchors


def _render_front_matter(run: TestRun, config: ReportConfig) -> str:
    generated_at = config.generated_at.astimezone(timezone.utc)
    title = (
        f"{run.summary.outcome.symbol} {config.title} "
        f"{generated_at.strftime('%Y-%m-%d %H:%M UTC')}"
    )

    data: dict[str, str] = {
        "title": title,
        "date": generated_at.isoformat(),
        "categories": "test-report",
        "excerpt_separator": EXCERPT_SEPARATOR,
    }

    git = config.git_info
    if git is not None:
        if git.repository_name:
            data["repository"] = git.repository_name
        if git.branch:
            data["branch"] = git.branch
        if git.commit is not None:
            data["commit"] = git.commit.id

    body = yaml.safe_dump(
        data, sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    return f"---\n{body}---\n\n"


def _render_summary(run: TestRun) -> str:
    summary = run.summary
    lines = [
        "| | Total | Passed | Failed | Ignored | Measured | Filtered | Duration |",
        "| --- | ----- | ------ | ------ | ------- | -------- | -------- | -------- |",
        (
            f"| {summary.outcome.marker} | {summary.total} | {summary.passed} "
            f"| {summary.failed} | {summary.ignored} | {summary.measured} "
            f"| {summary.filtered_out} | {format_elapsed(summary.elapsed_seconds)} |"
        ),
        "",
    ]

    if run.incomplete:
        count = len(run.incomplete)
        noun = "test" if count == 1 else "tests"
        lines.append(f"**Incomplete:** {count} {noun} started but never finished")
        lines.append("")

    return "\n".join(lines) + "\n"


def _render_git(git: GitInfo) -> str:
    repository = git.repository_url or git.repository_name or "<unknown>"
    branch = git.branch or "<unknown>"
    lines = [f"**Git:** `{repository}` @ `{branch}`", ""]

    commit = git.commit
    if commit is not None:
        lines.append(f"    Commit: {commit.id}")
        if commit.author:
            lines.append(f"    Author: {commit.author}")
        if commit.date:
            lines.append(f"    Date: {commit.date}")
        if commit.message:
            lines.append("")
            lines.extend(f"        {line}" for line in commit.message.splitlines())
        lines.append("")

    return "\n".join(lines) + "\n"


def _render_index(run: TestRun) -> str:
    lines = [
        EXCERPT_SEPARATOR,
        "",
        "# Index",
        "",
        "| Name | Result | Duration |",
        "| ---- | ------ | -------- |",
    ]
    for record, anchor in zip(run.tests, _heading_anchors(run.tests)):
        link = f"[{_escape_cell(record.name)}](#{anchor})"
        lines.append(
            f"| {link} | {record.outcome.marker} "
            f"| {format_elapsed(record.elapsed_seconds)} |"
        )
    return "\n".join(lines) + "\n"


def _render_details(run: TestRun) -> Iterator[str]:
    yield "\n# Details\n"

    for record in run.tests:
        lines = [
            "",
            f"## {record.outcome.symbol} {_escape_text(record.name)}",
            "",
            f"**Result**: {record.outcome.marker}",
            "",
            f"**Duration**: {format_elapsed(record.elapsed_seconds)}",
        ]
        if record.stdout:
            lines.extend(
                [
                    "",
                    "<details>",
                    "",
                    "<summary>Test output</summary>",
                    "",
                    "<pre>",
                    html.escape(record.stdout.rstrip("\n")),
                    "</pre>",
                    "",
                    "</details>",
                ]
            )
        yield "\n".join(lines) + "\n"
