"""Aggregated build diagnostics built from several dependent API calls."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from ascbridge.xcode_cloud.handlers import XcodeCloudHandlers
from ascbridge.xcode_cloud.models.diagnostics import (
    BuildFailureDetails,
    BuildRunOverview,
    BuildRunsSummary,
    BuildStatistics,
    FailedActionDetails,
)
from ascbridge.xcode_cloud.models.resources import CiBuildAction, CiBuildRun
from ascbridge.xcode_cloud.models.selectors import BuildRunSelector

logger = logging.getLogger(__name__)

SUMMARY_DEFAULT_LIMIT = 50

T = TypeVar("T")


async def gather_all(*aws: Awaitable[T]) -> list[T]:
    """Await all awaitables concurrently, keeping input order.

    The first failure cancels the awaitables still pending, waits for them
    to finish and is raised unchanged.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class CiDiagnostics:
    """Summaries and failure deep-dives over Xcode Cloud build runs."""

    def __init__(self, handlers: XcodeCloudHandlers) -> None:
        """Initialize diagnostics with resource handlers."""
        self.handlers = handlers

    async def get_build_runs_summary(
        self, selector: BuildRunSelector, limit: int = SUMMARY_DEFAULT_LIMIT
    ) -> BuildRunsSummary:
        """Summarize the most recent page of build runs.

        Only the returned page is considered; this is a snapshot, not an
        exhaustive report.

        Args:
            selector: Workflow or product whose build runs to summarize
            limit: Number of most recent build runs to include

        Returns:
            Per-run overview and counts by outcome

        """
        response = await self.handlers.list_ci_build_runs(
            selector, limit=limit, sort="-number"
        )

        statistics = BuildStatistics()
        builds: list[BuildRunOverview] = []
        for build_run in response.data:
            _count(statistics, build_run)
            builds.append(_overview(build_run))

        logger.info(
            f"Summarized {len(builds)} build runs: "
            f"{statistics.succeeded} succeeded, {statistics.failed} failed, "
            f"{statistics.running} running, {statistics.pending} pending, "
            f"{statistics.canceled} canceled"
        )
        return BuildRunsSummary(total=len(builds), builds=builds, statistics=statistics)

    async def get_build_failure_details(self, build_run_id: str) -> BuildFailureDetails:
        """Collect issues and test results for every failed action of a build run.

        An unknown build run ID raises the backend's not-found error. A
        failure of any issue or test result request fails the whole call.
        """
        build_run = (await self.handlers.get_ci_build_run(build_run_id)).data
        actions = (await self.handlers.list_ci_build_actions(build_run_id)).data

        failed_actions = [action for action in actions if action.has_failed]
        logger.info(
            f"Build run {build_run_id}: {len(failed_actions)} of "
            f"{len(actions)} actions failed"
        )

        details = await gather_all(
            *(self._failed_action_details(action) for action in failed_actions)
        )
        return BuildFailureDetails(build_run=build_run, failed_actions=details)

    async def _failed_action_details(
        self, action: CiBuildAction
    ) -> FailedActionDetails:
        if not action.is_test:
            issues = await self.handlers.list_ci_issues(action.id)
            return FailedActionDetails(action=action, issues=issues.data)

        issues, test_results = await gather_all(
            self.handlers.list_ci_issues(action.id),
            self.handlers.list_ci_test_results(action.id),
        )
        return FailedActionDetails(
            action=action,
            issues=issues.data,
            test_results=test_results.data or None,
        )


def _count(statistics: BuildStatistics, build_run: CiBuildRun) -> None:
    attributes = build_run.attributes
    if attributes.execution_progress == "RUNNING":
        statistics.running += 1
    elif attributes.execution_progress == "PENDING":
        statistics.pending += 1
    elif attributes.completion_status == "SUCCEEDED":
        statistics.succeeded += 1
    elif attributes.completion_status in {"FAILED", "ERRORED"}:
        statistics.failed += 1
    elif attributes.completion_status == "CANCELED":
        statistics.canceled += 1


def _overview(build_run: CiBuildRun) -> BuildRunOverview:
    attributes = build_run.attributes
    commit = attributes.source_commit
    return BuildRunOverview(
        id=build_run.id,
        number=attributes.number,
        status=build_run.status,
        execution_progress=attributes.execution_progress,
        completion_status=attributes.completion_status,
        created_date=attributes.created_date,
        started_date=attributes.started_date,
        finished_date=attributes.finished_date,
        commit_message=commit.message if commit else None,
        commit_author=(
            commit.author.display_name if commit and commit.author else None
        ),
        issue_counts=attributes.issue_counts,
    )
