"""Models for aggregated Xcode Cloud diagnostics."""

from pydantic import Field

from ascbridge.xcode_cloud.models.resources import (
    ApiModel,
    CiBuildAction,
    CiBuildRun,
    CiIssue,
    CiTestResult,
    IssueCounts,
)


class BuildStatistics(ApiModel):
    """Build run counts by outcome."""

    succeeded: int = 0
    failed: int = 0
    running: int = 0
    pending: int = 0
    canceled: int = 0


class BuildRunOverview(ApiModel):
    """Flat projection of a build run for triage."""

    id: str
    number: int | None = None
    status: str = Field(..., description="Completion status or execution progress")
    execution_progress: str
    completion_status: str | None = None
    created_date: str | None = None
    started_date: str | None = None
    finished_date: str | None = None
    commit_message: str | None = None
    commit_author: str | None = None
    issue_counts: IssueCounts | None = None


class BuildRunsSummary(ApiModel):
    """Snapshot of the most recent build runs and their statistics."""

    total: int
    builds: list[BuildRunOverview] = Field(default_factory=list)
    statistics: BuildStatistics = Field(default_factory=BuildStatistics)


class FailedActionDetails(ApiModel):
    """A failed build action with the issues and test results it reported."""

    action: CiBuildAction
    issues: list[CiIssue] = Field(default_factory=list)
    test_results: list[CiTestResult] | None = None


class BuildFailureDetails(ApiModel):
    """A build run and every failed action inside it."""

    build_run: CiBuildRun
    failed_actions: list[FailedActionDetails] = Field(default_factory=list)


class ArtifactDownload(ApiModel):
    """Download location of a build artifact."""

    download_url: str | None = None
    file_name: str
    file_size: int
