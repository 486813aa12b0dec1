"""Xcode Cloud resource operations on top of the App Store Connect client."""

import logging
from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from ascbridge.xcode_cloud.client import AppStoreConnectClient
from ascbridge.xcode_cloud.errors import InvalidArgumentError, InvalidResponseError
from ascbridge.xcode_cloud.models.diagnostics import ArtifactDownload
from ascbridge.xcode_cloud.models.resources import (
    CiArtifact,
    CiBuildAction,
    CiBuildRun,
    CiIssue,
    CiProduct,
    CiTestResult,
    CiWorkflow,
    CompletionStatus,
    ExecutionProgress,
    GitReferenceKind,
    ListResponse,
    ResourceResponse,
    ScmGitReference,
)
from ascbridge.xcode_cloud.models.selectors import BuildRunSelector
from ascbridge.xcode_cloud.query import DEFAULT_LIMIT, QueryOptions

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def _require(name: str, value: str | None) -> str:
    if not value:
        raise InvalidArgumentError(f"{name} is required")
    return value


def _include_only(include: Sequence[str] | None) -> dict[str, str | int]:
    return QueryOptions(
        include=list(include) if include else None, paginated=False
    ).compile_params()


def _parse(model: type[DocumentT], data: object, path: str) -> DocumentT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(
            f"Could not parse response for {path}: {e.error_count()} errors"
        )
        raise InvalidResponseError(path, str(e)) from e


class XcodeCloudHandlers:
    """One method per Xcode Cloud endpoint.

    Methods take plain arguments, compile them into query parameters and
    parse the returned document into resource models.
    """

    def __init__(self, client: AppStoreConnectClient) -> None:
        """Initialize handlers with an API client."""
        self.client = client

    # CI products

    async def list_ci_products(
        self,
        limit: int = DEFAULT_LIMIT,
        include: Sequence[str] | None = None,
        product_type: str | None = None,
    ) -> ListResponse[CiProduct]:
        """List products (apps and frameworks) configured for Xcode Cloud."""
        params = QueryOptions(
            limit=limit,
            include=list(include) if include else None,
            filters={"productType": product_type},
        ).compile_params()
        path = "/ciProducts"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiProduct], data, path)

    async def get_ci_product(
        self, product_id: str, include: Sequence[str] | None = None
    ) -> ResourceResponse[CiProduct]:
        """Get a single product."""
        _require("product_id", product_id)
        path = f"/ciProducts/{product_id}"
        data = await self.client.get(path, _include_only(include))
        return _parse(ResourceResponse[CiProduct], data, path)

    # CI workflows

    async def list_ci_workflows(
        self, product_id: str, limit: int = DEFAULT_LIMIT
    ) -> ListResponse[CiWorkflow]:
        """List the workflows of a product."""
        _require("product_id", product_id)
        params = QueryOptions(limit=limit).compile_params()
        path = f"/ciProducts/{product_id}/workflows"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiWorkflow], data, path)

    async def get_ci_workflow(
        self, workflow_id: str, include: Sequence[str] | None = None
    ) -> ResourceResponse[CiWorkflow]:
        """Get a single workflow."""
        _require("workflow_id", workflow_id)
        path = f"/ciWorkflows/{workflow_id}"
        data = await self.client.get(path, _include_only(include))
        return _parse(ResourceResponse[CiWorkflow], data, path)

    # CI build runs

    async def list_ci_build_runs(
        self,
        selector: BuildRunSelector,
        limit: int = DEFAULT_LIMIT,
        execution_progress: ExecutionProgress | None = None,
        completion_status: CompletionStatus | None = None,
        include: Sequence[str] | None = None,
        sort: str | None = None,
    ) -> ListResponse[CiBuildRun]:
        """List build runs of a workflow or of a whole product."""
        params = QueryOptions(
            limit=limit,
            include=list(include) if include else None,
            filters={
                "executionProgress": execution_progress,
                "completionStatus": completion_status,
            },
            sort=sort,
        ).compile_params()
        path = selector.build_runs_path
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiBuildRun], data, path)

    async def get_ci_build_run(
        self, build_run_id: str, include: Sequence[str] | None = None
    ) -> ResourceResponse[CiBuildRun]:
        """Get a single build run."""
        _require("build_run_id", build_run_id)
        path = f"/ciBuildRuns/{build_run_id}"
        data = await self.client.get(path, _include_only(include))
        return _parse(ResourceResponse[CiBuildRun], data, path)

    async def start_ci_build_run(
        self,
        workflow_id: str,
        git_reference_id: str | None = None,
        clean: bool | None = None,
    ) -> ResourceResponse[CiBuildRun]:
        """Start a build run of a workflow.

        This is a single attempt; a failed request is never retried because
        a retry could start a second build.

        Args:
            workflow_id: Workflow to run
            git_reference_id: Branch or tag to build, defaults to the
                workflow's configured start condition
            clean: Whether to perform a clean build

        Returns:
            The created build run

        """
        _require("workflow_id", workflow_id)

        relationships: dict[str, object] = {
            "workflow": {"data": {"id": workflow_id, "type": "ciWorkflows"}},
        }
        if git_reference_id:
            relationships["sourceBranchOrTag"] = {
                "data": {"id": git_reference_id, "type": "scmGitReferences"}
            }

        resource: dict[str, object] = {"type": "ciBuildRuns"}
        if clean is not None:
            resource["attributes"] = {"clean": clean}
        resource["relationships"] = relationships

        logger.info(f"Starting build run for workflow {workflow_id}")
        path = "/ciBuildRuns"
        data = await self.client.post(path, {"data": resource})
        return _parse(ResourceResponse[CiBuildRun], data, path)

    async def cancel_ci_build_run(self, build_run_id: str) -> None:
        """Cancel a build run that is still in progress."""
        _require("build_run_id", build_run_id)
        logger.info(f"Canceling build run {build_run_id}")
        await self.client.delete(f"/ciBuildRuns/{build_run_id}")

    # CI build actions

    async def list_ci_build_actions(
        self, build_run_id: str, limit: int = DEFAULT_LIMIT
    ) -> ListResponse[CiBuildAction]:
        """List the actions of a build run."""
        _require("build_run_id", build_run_id)
        params = QueryOptions(limit=limit).compile_params()
        path = f"/ciBuildRuns/{build_run_id}/actions"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiBuildAction], data, path)

    async def get_ci_build_action(
        self, action_id: str, include: Sequence[str] | None = None
    ) -> ResourceResponse[CiBuildAction]:
        """Get a single build action."""
        _require("action_id", action_id)
        path = f"/ciBuildActions/{action_id}"
        data = await self.client.get(path, _include_only(include))
        return _parse(ResourceResponse[CiBuildAction], data, path)

    # Issues, test results and artifacts

    async def list_ci_issues(
        self, build_action_id: str, limit: int = DEFAULT_LIMIT
    ) -> ListResponse[CiIssue]:
        """List errors, warnings and test failures of a build action."""
        _require("build_action_id", build_action_id)
        params = QueryOptions(limit=limit).compile_params()
        path = f"/ciBuildActions/{build_action_id}/issues"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiIssue], data, path)

    async def list_ci_test_results(
        self, build_action_id: str, limit: int = DEFAULT_LIMIT
    ) -> ListResponse[CiTestResult]:
        """List test results of a test action."""
        _require("build_action_id", build_action_id)
        params = QueryOptions(limit=limit).compile_params()
        path = f"/ciBuildActions/{build_action_id}/testResults"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiTestResult], data, path)

    async def list_ci_artifacts(
        self, build_action_id: str, limit: int = DEFAULT_LIMIT
    ) -> ListResponse[CiArtifact]:
        """List artifacts (logs, archives, result bundles) of a build action."""
        _require("build_action_id", build_action_id)
        params = QueryOptions(limit=limit).compile_params()
        path = f"/ciBuildActions/{build_action_id}/artifacts"
        data = await self.client.get(path, params)
        return _parse(ListResponse[CiArtifact], data, path)

    async def download_ci_artifact(self, artifact_id: str) -> ArtifactDownload:
        """Resolve the download location of an artifact."""
        _require("artifact_id", artifact_id)
        path = f"/ciArtifacts/{artifact_id}"
        data = await self.client.get(path)
        artifact = _parse(ResourceResponse[CiArtifact], data, path).data
        return ArtifactDownload(
            download_url=artifact.attributes.download_url,
            file_name=artifact.attributes.file_name,
            file_size=artifact.attributes.file_size,
        )

    # SCM git references

    async def list_git_references(
        self,
        repository_id: str,
        limit: int = DEFAULT_LIMIT,
        kind: GitReferenceKind | None = None,
    ) -> ListResponse[ScmGitReference]:
        """List branches and tags of a source repository."""
        _require("repository_id", repository_id)
        params = QueryOptions(limit=limit, filters={"kind": kind}).compile_params()
        path = f"/scmRepositories/{repository_id}/gitReferences"
        data = await self.client.get(path, params)
        return _parse(ListResponse[ScmGitReference], data, path)
