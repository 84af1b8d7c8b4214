"""Fold a stream of test events into a TestRun."""

import logging
from collections import Counter
from collections.abc import Iterable

from testreport.markdown_report.models.event import (
    Event,
    SuiteFailed,
    SuiteOk,
    SuiteStarted,
    TestFailed,
    TestIgnored,
    TestOk,
    TestStarted,
    TestTerminalEvent,
    TestTimeout,
)
from testreport.markdown_report.models.test_run import (
    Outcome,
    SuiteOutcome,
    SuiteSummary,
    TestRecord,
    TestRun,
)

logger = logging.getLogger(__name__)


class TestRunAggregator:
    """Accumulates events for a single run.

    Tests are kept in the order their name was first seen. A later terminal
    event for the same name replaces the earlier one, and the last suite
    terminal event wins.
    """

    __test__ = False

    def __init__(self) -> None:
        """Initialize an empty aggregator."""
        # None marks a test that started but has not finished yet
        self._records: dict[str, TestRecord | None] = {}
        self._expected_count: int | None = None
        # count announced by the suite currently running
        self._pending_count: int | None = None
        self._suite_event: tuple[SuiteOk | SuiteFailed, int | None] | None = None

    def add(self, event: Event) -> None:
        """Apply a single event."""
        if isinstance(event, TestStarted):
            self._records.setdefault(event.name, None)
        elif isinstance(event, TestTerminalEvent):
            if self._records.get(event.name) is not None:
                logger.debug(f"Replacing earlier result for test: {event.name}")
            self._records[event.name] = _record_from_event(event)
        elif isinstance(event, SuiteStarted):
            self._expected_count = event.test_count
            self._pending_count = event.test_count
        else:
            if self._suite_event is not None:
                logger.debug("Replacing earlier suite result")
            self._suite_event = (event, self._pending_count)
            self._pending_count = None

    def extend(self, events: Iterable[Event]) -> None:
        """Apply events in order."""
        for event in events:
            self.add(event)

    def build(self) -> TestRun:
        """Produce the TestRun for everything seen so far."""
        tests = tuple(r for r in self._records.values() if r is not None)
        incomplete = tuple(n for n, r in self._records.items() if r is None)

        if incomplete:
            logger.warning(
                f"{len(incomplete)} tests started but never finished: "
                f"{', '.join(incomplete)}"
            )

        if self._suite_event is None:
            logger.info("No suite result found, counting test results")
            summary = _summary_from_records(tests)
        else:
            summary = self._summary_from_suite(*self._suite_event)
            _check_consistency(summary, tests)

        return TestRun(
            summary=summary,
            tests=tests,
            expected_count=self._expected_count,
            incomplete=incomplete,
        )

    def _summary_from_suite(
        self, event: SuiteOk | SuiteFailed, expected_count: int | None
    ) -> SuiteSummary:
        if expected_count is not None:
            total = expected_count
        else:
            total = event.passed + event.failed + event.ignored + event.measured

        if isinstance(event, SuiteOk):
            outcome = SuiteOutcome.OK
        else:
            outcome = SuiteOutcome.FAILED

        return SuiteSummary(
            total=total,
            passed=event.passed,
            failed=event.failed,
            ignored=event.ignored,
            measured=event.measured,
            filtered_out=event.filtered_out,
            elapsed_seconds=event.elapsed_seconds,
            outcome=outcome,
        )


def aggregate(events: Iterable[Event]) -> TestRun:
    """Fold an event sequence into a TestRun.

    Args:
        events: Events in input order

    Returns:
        The aggregated run; empty when no events were given

    """
    aggregator = TestRunAggregator()
    aggregator.extend(events)
    return aggregator.build()


def _record_from_event(event: TestTerminalEvent) -> TestRecord:
    """Build the record a terminal test event resolves to."""
    if isinstance(event, TestOk):
        return TestRecord(
            name=event.name, outcome=Outcome.OK, elapsed_seconds=event.elapsed_seconds
        )
    if isinstance(event, TestFailed):
        return TestRecord(
            name=event.name,
            outcome=Outcome.FAILED,
            elapsed_seconds=event.elapsed_seconds,
            stdout=event.stdout,
        )
    if isinstance(event, TestTimeout):
        return TestRecord(
            name=event.name,
            outcome=Outcome.TIMEOUT,
            elapsed_seconds=event.elapsed_seconds,
        )
    if isinstance(event, TestIgnored):
        return TestRecord(name=event.name, outcome=Outcome.IGNORED)
    raise TypeError(f"Not a terminal test event: {type(event).__name__}")


def _summary_from_records(tests: tuple[TestRecord, ...]) -> SuiteSummary:
    """Synthesize suite counters when the input had no suite result."""
    counts = Counter(t.outcome for t in tests)
    failed = counts[Outcome.FAILED] + counts[Outcome.TIMEOUT]

    return SuiteSummary(
        total=len(tests),
        passed=counts[Outcome.OK],
        failed=failed,
        ignored=counts[Outcome.IGNORED],
        outcome=SuiteOutcome.FAILED if failed else SuiteOutcome.OK,
        derived=True,
    )


def _check_consistency(summary: SuiteSummary, tests: tuple[TestRecord, ...]) -> None:
    """Log when reported suite counters disagree with the observed tests.

    The suite counters are kept as reported.
    """
    observed = _summary_from_records(tests)
    mismatches = [
        f"{field}: reported {reported}, observed {counted}"
        for field, reported, counted in (
            ("passed", summary.passed, observed.passed),
            ("failed", summary.failed, observed.failed),
            ("ignored", summary.ignored, observed.ignored),
        )
        if reported != counted
    ]
    if mismatches:
        logger.warning(
            f"Suite counters differ from test results ({'; '.join(mismatches)})"
        )
