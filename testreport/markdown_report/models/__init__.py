"""Data models for test events, aggregated runs, and report configuration."""

from testreport.markdown_report.models.event import (
    Event,
    SuiteEvent,
    SuiteFailed,
    SuiteOk,
    SuiteStarted,
    TestEvent,
    TestFailed,
    TestIgnored,
    TestOk,
    TestStarted,
    TestTerminalEvent,
    TestTimeout,
)
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

__all__ = [
    "CommitInfo",
    "Event",
    "GitInfo",
    "Outcome",
    "ReportConfig",
    "SuiteEvent",
    "SuiteFailed",
    "SuiteOk",
    "SuiteOutcome",
    "SuiteStarted",
    "SuiteSummary",
    "TestEvent",
    "TestFailed",
    "TestIgnored",
    "TestOk",
    "TestRecord",
    "TestRun",
    "TestStarted",
    "TestTerminalEvent",
    "TestTimeout",
]
