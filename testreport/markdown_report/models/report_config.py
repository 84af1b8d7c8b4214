"""Configuration models for rendering a report."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommitInfo(BaseModel):
    """The commit the tests ran against."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Full commit hash")
    author: str | None = Field(default=None, description="Author name and email")
    date: str | None = Field(default=None, description="Author date (RFC 2822)")
    message: str | None = Field(default=None, description="Full commit message")


class GitInfo(BaseModel):
    """Repository provenance, all fields best-effort."""

    model_config = ConfigDict(frozen=True)

    repository_name: str | None = Field(
        default=None, description="Repository name (e.g., org/repo)"
    )
    repository_url: str | None = Field(default=None, description="Origin remote URL")
    branch: str | None = Field(default=None, description="Checked out branch")
    commit: CommitInfo | None = Field(default=None, description="HEAD commit")


class ReportConfig(BaseModel):
    """Options controlling the rendered Markdown."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime = Field(..., description="Report generation timestamp")
    include_front_matter: bool = Field(
        default=True, description="Emit the YAML metadata header"
    )
    summary_only: bool = Field(
        default=False, description="Omit the per-test index and details"
    )
    git_info: GitInfo | None = Field(default=None, description="Git provenance")
    job_url: str | None = Field(default=None, description="Link to the CI job")
    title: str = Field(default="Test Result", description="Report title")
