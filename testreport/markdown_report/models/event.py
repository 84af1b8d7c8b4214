"""Models for the JSON events emitted by the test harness.

Every input line is a JSON object tagged twice: ``type`` selects between
suite-level and test-level events, ``event`` selects the lifecycle step.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

_EVENT_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class SuiteStarted(BaseModel):
    """A test suite started running."""

    model_config = _EVENT_CONFIG

    type: Literal["suite"] = "suite"
    event: Literal["started"] = "started"
    test_count: int = Field(..., ge=0, description="Number of tests to run")


class _SuiteFinished(BaseModel):
    """Counters shared by both suite-terminal events."""

    model_config = _EVENT_CONFIG

    type: Literal["suite"] = "suite"
    passed: int = Field(default=0, ge=0, description="Tests that passed")
    failed: int = Field(default=0, ge=0, description="Tests that failed")
    ignored: int = Field(default=0, ge=0, description="Tests that were ignored")
    measured: int = Field(default=0, ge=0, description="Benchmarks measured")
    filtered_out: int = Field(default=0, ge=0, description="Tests filtered out")
    elapsed_seconds: float | None = Field(
        default=None, ge=0, alias="exec_time", description="Suite run time"
    )


class SuiteOk(_SuiteFinished):
    """A test suite finished without failures."""

    event: Literal["ok"] = "ok"


class SuiteFailed(_SuiteFinished):
    """A test suite finished with at least one failure."""

    event: Literal["failed"] = "failed"


class TestStarted(BaseModel):
    """A single test started running."""

    __test__ = False
    model_config = _EVENT_CONFIG

    type: Literal["test"] = "test"
    event: Literal["started"] = "started"
    name: str = Field(..., description="Fully qualified test name")


class TestOk(BaseModel):
    """A single test passed."""

    __test__ = False
    model_config = _EVENT_CONFIG

    type: Literal["test"] = "test"
    event: Literal["ok"] = "ok"
    name: str = Field(..., description="Fully qualified test name")
    elapsed_seconds: float | None = Field(
        default=None, ge=0, alias="exec_time", description="Test run time"
    )


class TestFailed(BaseModel):
    """A single test failed."""

    __test__ = False
    model_config = _EVENT_CONFIG

    type: Literal["test"] = "test"
    event: Literal["failed"] = "failed"
    name: str = Field(..., description="Fully qualified test name")
    elapsed_seconds: float | None = Field(
        default=None, ge=0, alias="exec_time", description="Test run time"
    )
    stdout: str | None = Field(default=None, description="Captured test output")


class TestIgnored(BaseModel):
    """A single test was skipped."""

    __test__ = False
    model_config = _EVENT_CONFIG

    type: Literal["test"] = "test"
    event: Literal["ignored"] = "ignored"
    name: str = Field(..., description="Fully qualified test name")


class TestTimeout(BaseModel):
    """A single test exceeded its time limit."""

    __test__ = False
    model_config = _EVENT_CONFIG

    type: Literal["test"] = "test"
    event: Literal["timeout"] = "timeout"
    name: str = Field(..., description="Fully qualified test name")
    elapsed_seconds: float | None = Field(
        default=None, ge=0, alias="exec_time", description="Test run time"
    )


SuiteEvent = Annotated[
    SuiteStarted | SuiteOk | SuiteFailed, Field(discriminator="event")
]
TestEvent = Annotated[
    TestStarted | TestOk | TestFailed | TestIgnored | TestTimeout,
    Field(discriminator="event"),
]
TestTerminalEvent = TestOk | TestFailed | TestIgnored | TestTimeout
Event = Annotated[SuiteEvent | TestEvent, Field(discriminator="type")]
