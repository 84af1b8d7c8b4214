"""Tests for the Markdown renderer."""

from datetime import datetime, timezone

import pytest
import yaml

from testreport.markdown_report.models.report_config import (
    CommitInfo,
    GitInfo,
    ReportConfig,
)
from testreport.markdown_report.models.test_run import (
    Outcome,
    SuiteOutcome,
    SuiteSummary,
    TestRecord,
    TestRun,
)
from testreport.markdown_report.renderer import (
    format_elapsed,
    iter_report,
    make_anchor,
    render_report,
)

GENERATED_AT = datetime(2024, 5, 1, 12, 30, 15, tzinfo=timezone.utc)


@pytest.fixture
def sample_run() -> TestRun:
    """Create a run with one test of each outcome."""
    return TestRun(
        summary=SuiteSummary(
            total=4,
            passed=1,
            failed=1,
            ignored=1,
            elapsed_seconds=3.5,
            outcome=SuiteOutcome.FAILED,
        ),
        tests=(
            TestRecord(name="tests::zeta", outcome=Outcome.OK, elapsed_seconds=0.5),
            TestRecord(
                name="tests::alpha",
                outcome=Outcome.FAILED,
                elapsed_seconds=1.0,
                stdout="thread panicked at 'a < b'\n",
            ),
            TestRecord(name="tests::skipped", outcome=Outcome.IGNORED),
            TestRecord(
                name="tests::slow", outcome=Outcome.TIMEOUT, elapsed_seconds=60.0
            ),
        ),
    )


@pytest.fixture
def config() -> ReportConfig:
    """Create a default report configuration."""
    return ReportConfig(generated_at=GENERATED_AT)


def _front_matter(report: str) -> dict[str, object]:
    assert report.startswith("---\n")
    block = report.split("---\n")[1]
    data: dict[str, object] = yaml.safe_load(block)
    return data


def test_format_elapsed() -> None:
    """format_elapsed uses fixed precision and a placeholder for unknown values."""
    assert format_elapsed(0.5) == "0.500s"
    assert format_elapsed(12.34567) == "12.346s"
    assert format_elapsed(0.0) == "0.000s"
    assert format_elapsed(None) == "-"


@pytest.mark.parametrize(
    ("heading", "anchor"),
    [
        ("", ""),
        (
            "✅ tests::parser::test_parse_header_and_body",
            "-testsparsertest_parse_header_and_body",
        ),
        ("foo  bar", "foo-bar"),
        ("Foo - Bar", "foo-bar"),
    ],
)
def test_make_anchor(heading: str, anchor: str) -> None:
    """make_anchor builds heading link fragments."""
    assert make_anchor(heading) == anchor


def test_front_matter_fields(sample_run: TestRun, config: ReportConfig) -> None:
    """Front matter carries title, date and report category."""
    report = render_report(sample_run, config)

    data = _front_matter(report)
    assert data["title"] == "❌ Test Result 2024-05-01 12:30 UTC"
    assert data["date"] == "2024-05-01T12:30:15+00:00"
    assert data["categories"] == "test-report"
    assert data["excerpt_separator"] == "<!--more-->"
    assert "repository" not in data
    assert "branch" not in data
    assert "commit" not in data


def test_front_matter_git_fields(sample_run: TestRun) -> None:
    """Front matter includes the git fields that are known."""
    config = ReportConfig(
        generated_at=GENERATED_AT,
        git_info=GitInfo(
            repository_name="org/repo",
            branch="main",
            commit=CommitInfo(id="0123abcd"),
        ),
    )

    data = _front_matter(render_report(sample_run, config))

    assert data["repository"] == "org/repo"
    assert data["branch"] == "main"
    assert data["commit"] == "0123abcd"


def test_front_matter_partial_git_fields(sample_run: TestRun) -> None:
    """Front matter omits git fields that are unknown."""
    config = ReportConfig(
        generated_at=GENERATED_AT, git_info=GitInfo(repository_name="org/repo")
    )

    data = _front_matter(render_report(sample_run, config))

    assert data["repository"] == "org/repo"
    assert "branch" not in data
    assert "commit" not in data


def test_no_front_matter(sample_run: TestRun) -> None:
    """Front matter is skipped when disabled."""
    config = ReportConfig(generated_at=GENERATED_AT, include_front_matter=False)

    report = render_report(sample_run, config)

    assert not report.startswith("---")
    assert "categories: test-report" not in report


def test_summary_table(sample_run: TestRun, config: ReportConfig) -> None:
    """The summary table lists every counter and the suite outcome."""
    report = render_report(sample_run, config)

    assert (
        "| | Total | Passed | Failed | Ignored | Measured | Filtered | Duration |"
        in report
    )
    assert "| ❌ failed | 4 | 1 | 1 | 1 | 0 | 0 | 3.500s |" in report


def test_summary_without_elapsed_uses_placeholder(config: ReportConfig) -> None:
    """An unknown suite duration renders as a placeholder, not zero."""
    run = TestRun(summary=SuiteSummary(total=0, derived=True))

    report = render_report(run, config)

    assert "| ✅ ok | 0 | 0 | 0 | 0 | 0 | 0 | - |" in report


def test_details_in_stored_order(sample_run: TestRun, config: ReportConfig) -> None:
    """Index rows and detail sections follow the stored order."""
    report = render_report(sample_run, config)

    names = ["tests::zeta", "tests::alpha", "tests::skipped", "tests::slow"]
    index = report.index("# Index")
    details = report.index("# Details")

    index_positions = [report.index(f"[{name}]", index) for name in names]
    assert index_positions == sorted(index_positions)

    detail_positions = [report.index(f" {name}\n", details) for name in names]
    assert detail_positions == sorted(detail_positions)


def test_index_rows(sample_run: TestRun, config: ReportConfig) -> None:
    """Index rows link to the detail headings and show outcome and duration."""
    report = render_report(sample_run, config)

    assert "| [tests::zeta](#-testszeta) | ✅ ok | 0.500s |" in report
    assert "| [tests::alpha](#-testsalpha) | ❌ failed | 1.000s |" in report
    assert "| [tests::skipped](#-testsskipped) | ⏭️ ignored | - |" in report
    assert "| [tests::slow](#-testsslow) | ⏱️ timeout | 60.000s |" in report
    assert "## ✅ tests::zeta" in report
    assert "## ❌ tests::alpha" in report


def test_failed_output_is_collapsible_and_escaped(config: ReportConfig) -> None:
    """Failure output is escaped inside a collapsible block."""
    run = TestRun(
        tests=(
            TestRecord(
                name="a",
                outcome=Outcome.FAILED,
                stdout="expected <html> & \"quotes\"\n",
            ),
        )
    )

    report = render_report(run, config)

    assert "<details>" in report
    assert "<summary>Test output</summary>" in report
    assert "expected &lt;html&gt; &amp; &quot;quotes&quot;" in report
    assert "<html>" not in report


def test_output_block_only_with_stdout(config: ReportConfig) -> None:
    """Tests without captured output get no output block."""
    run = TestRun(tests=(TestRecord(name="a", outcome=Outcome.FAILED),))

    report = render_report(run, config)

    assert "<details>" not in report


def test_pipe_in_name_escaped_in_index(config: ReportConfig) -> None:
    """Pipe characters in names do not break the index table."""
    run = TestRun(tests=(TestRecord(name="case|one", outcome=Outcome.OK),))

    report = render_report(run, config)

    assert "[case\\|one]" in report


def test_link_and_heading_characters_escaped_in_names(config: ReportConfig) -> None:
    """Brackets and angle brackets in names are escaped in links and headings."""
    run = TestRun(tests=(TestRecord(name="parse[0]<T>", outcome=Outcome.OK),))

    report = render_report(run, config)

    assert "| [parse\\[0\\]\\<T>](#-parse0t) |" in report
    assert "\n## ✅ parse\\[0\\]\\<T>\n" in report


def test_colliding_anchors_numbered(config: ReportConfig) -> None:
    """Headings with the same anchor get numbered links, in order."""
    run = TestRun(
        tests=(
            TestRecord(name="mod::ab", outcome=Outcome.OK),
            TestRecord(name="mod::a::b", outcome=Outcome.OK),
            TestRecord(name="mod::a:b", outcome=Outcome.OK),
        )
    )

    report = render_report(run, config)

    assert "[mod::ab](#-modab) |" in report
    assert "[mod::a::b](#-modab-1) |" in report
    assert "[mod::a:b](#-modab-2) |" in report


def test_summary_only_omits_test_names(
    sample_run: TestRun, config: ReportConfig
) -> None:
    """summary_only leaves out every per-test name."""
    full = render_report(sample_run, config)
    summary = render_report(
        sample_run, config.model_copy(update={"summary_only": True})
    )

    for record in sample_run.tests:
        assert record.name in full
        assert record.name not in summary
    assert "# Index" not in summary
    assert "# Details" not in summary
    assert "| ❌ failed | 4 |" in summary


def test_incomplete_tests_counted_in_summary(config: ReportConfig) -> None:
    """Unfinished tests are reported as a count in the summary."""
    run = TestRun(incomplete=("hung::test",))

    summary = render_report(run, config.model_copy(update={"summary_only": True}))

    assert "**Incomplete:** 1 test started but never finished" in summary
    assert "hung::test" not in summary


def test_several_incomplete_tests_counted_in_summary(config: ReportConfig) -> None:
    """The incomplete count uses the plural for more than one test."""
    run = TestRun(incomplete=("hung::one", "hung::two"))

    summary = render_report(run, config)

    assert "**Incomplete:** 2 tests started but never finished" in summary


def test_git_section(sample_run: TestRun) -> None:
    """The git section shows repository, branch, and commit details."""
    config = ReportConfig(
        generated_at=GENERATED_AT,
        include_front_matter=False,
        git_info=GitInfo(
            repository_name="org/repo",
            repository_url="https://github.com/org/repo.git",
            branch="main",
            commit=CommitInfo(
                id="0123abcd",
                author="Dev <dev@example.com>",
                date="Wed, 1 May 2024 12:00:00 +0000",
                message="Fix things\n\nLonger body",
            ),
        ),
    )

    report = render_report(sample_run, config)

    assert "**Git:** `https://github.com/org/repo.git` @ `main`" in report
    assert "    Commit: 0123abcd" in report
    assert "    Author: Dev <dev@example.com>" in report
    assert "    Date: Wed, 1 May 2024 12:00:00 +0000" in report
    assert "        Fix things" in report
    assert "        Longer body" in report


def test_no_git_section_without_git_info(
    sample_run: TestRun, config: ReportConfig
) -> None:
    """No git section is rendered without git information."""
    assert "**Git:**" not in render_report(sample_run, config)


def test_job_link(sample_run: TestRun) -> None:
    """A CI job URL is rendered as a link."""
    url = "https://github.com/org/repo/actions/runs/42"
    config = ReportConfig(generated_at=GENERATED_AT, job_url=url)

    report = render_report(sample_run, config)

    assert f"**Job:** [{url}]({url})" in report


def test_render_is_deterministic(sample_run: TestRun, config: ReportConfig) -> None:
    """Rendering the same input twice gives identical output."""
    assert render_report(sample_run, config) == render_report(sample_run, config)


def test_iter_report_matches_render(sample_run: TestRun, config: ReportConfig) -> None:
    """iter_report yields the same document in chunks."""
    chunks = list(iter_report(sample_run, config))

    assert len(chunks) > 1
    assert "".join(chunks) == render_report(sample_run, config)


def test_custom_title(sample_run: TestRun) -> None:
    """The front matter title uses the configured report title."""
    config = ReportConfig(generated_at=GENERATED_AT, title="Nightly")

    data = _front_matter(render_report(sample_run, config))

    assert data["title"] == "❌ Nightly 2024-05-01 12:30 UTC"
