"""CLI entry point exposing Xcode Cloud operations as JSON-printing commands."""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import NoReturn

import aiohttp
import typer
from pydantic import BaseModel

from ascbridge.xcode_cloud.client import AppStoreConnectClient
from ascbridge.xcode_cloud.diagnostics import SUMMARY_DEFAULT_LIMIT, CiDiagnostics
from ascbridge.xcode_cloud.errors import XcodeCloudError
from ascbridge.xcode_cloud.handlers import XcodeCloudHandlers
from ascbridge.xcode_cloud.models.config import load_config
from ascbridge.xcode_cloud.models.selectors import selector_from_ids
from ascbridge.xcode_cloud.query import DEFAULT_LIMIT

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Query and drive Xcode Cloud through App Store Connect.")

Operation = Callable[[XcodeCloudHandlers], Awaitable[BaseModel | dict[str, object]]]


def _build_handlers() -> XcodeCloudHandlers:
    """Load configuration and wire the client stack."""
    config = load_config()
    return XcodeCloudHandlers(AppStoreConnectClient(config))


def _fail(error: dict[str, object]) -> NoReturn:
    typer.echo(json.dumps({"error": error}, indent=2), err=True)
    raise typer.Exit(code=1)


def _run(operation: Operation) -> None:
    """Run an operation and print its result as JSON."""
    try:
        handlers = _build_handlers()
        result = asyncio.run(operation(handlers))
    except XcodeCloudError as e:
        logger.error(f"{type(e).__name__}: {e}")
        _fail(e.to_dict())
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Could not reach App Store Connect: {type(e).__name__}: {e}")
        _fail({"kind": "transport", "message": str(e) or type(e).__name__})

    if isinstance(result, BaseModel):
        output = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        output = result
    typer.echo(json.dumps(output, indent=2))


@app.command("products")
def products(
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum products (1-200)"),
    include: list[str] | None = typer.Option(None, help="Related resources"),
    product_type: str | None = typer.Option(None, help="APP or FRAMEWORK"),
) -> None:
    """List Xcode Cloud products."""
    _run(
        lambda h: h.list_ci_products(
            limit=limit, include=include, product_type=product_type
        )
    )


@app.command("product")
def product(
    product_id: str = typer.Argument(..., help="CI product ID"),
    include: list[str] | None = typer.Option(None, help="Related resources"),
) -> None:
    """Show a single product."""
    _run(lambda h: h.get_ci_product(product_id, include=include))


@app.command("workflows")
def workflows(
    product_id: str = typer.Argument(..., help="CI product ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum workflows (1-200)"),
) -> None:
    """List the workflows of a product."""
    _run(lambda h: h.list_ci_workflows(product_id, limit=limit))


@app.command("workflow")
def workflow(
    workflow_id: str = typer.Argument(..., help="CI workflow ID"),
    include: list[str] | None = typer.Option(None, help="Related resources"),
) -> None:
    """Show a single workflow."""
    _run(lambda h: h.get_ci_workflow(workflow_id, include=include))


@app.command("build-runs")
def build_runs(
    workflow_id: str | None = typer.Option(None, help="CI workflow ID"),
    product_id: str | None = typer.Option(None, help="CI product ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum build runs (1-200)"),
    execution_progress: str | None = typer.Option(
        None, help="PENDING, RUNNING or COMPLETE"
    ),
    completion_status: str | None = typer.Option(
        None, help="SUCCEEDED, FAILED, ERRORED, CANCELED or SKIPPED"
    ),
    include: list[str] | None = typer.Option(None, help="Related resources"),
    sort: str | None = typer.Option(None, help="number, -number, createdDate..."),
) -> None:
    """List build runs of a workflow or product."""
    try:
        selector = selector_from_ids(workflow_id, product_id)
    except XcodeCloudError as e:
        _fail(e.to_dict())

    _run(
        lambda h: h.list_ci_build_runs(
            selector,
            limit=limit,
            execution_progress=execution_progress,  # type: ignore[arg-type]
            completion_status=completion_status,  # type: ignore[arg-type]
            include=include,
            sort=sort,
        )
    )


@app.command("build-run")
def build_run(
    build_run_id: str = typer.Argument(..., help="CI build run ID"),
    include: list[str] | None = typer.Option(None, help="Related resources"),
) -> None:
    """Show a single build run."""
    _run(lambda h: h.get_ci_build_run(build_run_id, include=include))


@app.command("start-build")
def start_build(
    workflow_id: str = typer.Argument(..., help="CI workflow ID"),
    git_reference_id: str | None = typer.Option(None, help="Branch or tag ID"),
    clean: bool | None = typer.Option(None, "--clean/--no-clean", help="Clean build"),
) -> None:
    """Start a build run of a workflow."""
    _run(
        lambda h: h.start_ci_build_run(
            workflow_id, git_reference_id=git_reference_id, clean=clean
        )
    )


@app.command("cancel-build")
def cancel_build(
    build_run_id: str = typer.Argument(..., help="CI build run ID"),
) -> None:
    """Cancel a build run in progress."""

    async def cancel(h: XcodeCloudHandlers) -> dict[str, object]:
        await h.cancel_ci_build_run(build_run_id)
        return {"canceled": True, "buildRunId": build_run_id}

    _run(cancel)


@app.command("actions")
def actions(
    build_run_id: str = typer.Argument(..., help="CI build run ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum actions (1-200)"),
) -> None:
    """List the actions of a build run."""
    _run(lambda h: h.list_ci_build_actions(build_run_id, limit=limit))


@app.command("action")
def action(
    action_id: str = typer.Argument(..., help="CI build action ID"),
    include: list[str] | None = typer.Option(None, help="Related resources"),
) -> None:
    """Show a single build action."""
    _run(lambda h: h.get_ci_build_action(action_id, include=include))


@app.command("issues")
def issues(
    build_action_id: str = typer.Argument(..., help="CI build action ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum issues (1-200)"),
) -> None:
    """List issues of a build action."""
    _run(lambda h: h.list_ci_issues(build_action_id, limit=limit))


@app.command("test-results")
def test_results(
    build_action_id: str = typer.Argument(..., help="CI build action ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum test results (1-200)"),
) -> None:
    """List test results of a test action."""
    _run(lambda h: h.list_ci_test_results(build_action_id, limit=limit))


@app.command("artifacts")
def artifacts(
    build_action_id: str = typer.Argument(..., help="CI build action ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum artifacts (1-200)"),
) -> None:
    """List artifacts of a build action."""
    _run(lambda h: h.list_ci_artifacts(build_action_id, limit=limit))


@app.command("artifact-download")
def artifact_download(
    artifact_id: str = typer.Argument(..., help="CI artifact ID"),
) -> None:
    """Show the download URL of an artifact."""
    _run(lambda h: h.download_ci_artifact(artifact_id))


@app.command("git-references")
def git_references(
    repository_id: str = typer.Argument(..., help="SCM repository ID"),
    limit: int = typer.Option(DEFAULT_LIMIT, help="Maximum references (1-200)"),
    kind: str | None = typer.Option(None, help="BRANCH or TAG"),
) -> None:
    """List branches and tags of a repository."""
    _run(
        lambda h: h.list_git_references(
            repository_id,
            limit=limit,
            kind=kind,  # type: ignore[arg-type]
        )
    )


@app.command("builds-summary")
def builds_summary(
    workflow_id: str | None = typer.Option(None, help="CI workflow ID"),
    product_id: str | None = typer.Option(None, help="CI product ID"),
    limit: int = typer.Option(SUMMARY_DEFAULT_LIMIT, help="Recent build runs"),
) -> None:
    """Summarize recent build runs with counts by outcome."""
    try:
        selector = selector_from_ids(workflow_id, product_id)
    except XcodeCloudError as e:
        _fail(e.to_dict())

    _run(lambda h: CiDiagnostics(h).get_build_runs_summary(selector, limit=limit))


@app.command("failure-details")
def failure_details(
    build_run_id: str = typer.Argument(..., help="CI build run ID"),
) -> None:
    """Show issues and test results of every failed action in a build run."""
    _run(lambda h: CiDiagnostics(h).get_build_failure_details(build_run_id))


if __name__ == "__main__":  # pragma: no cover
    app()
