"""Selectors choosing which build runs to list."""

from typing import Literal

from pydantic import BaseModel, Field

from ascbridge.xcode_cloud.errors import InvalidArgumentError


class ByWorkflow(BaseModel):
    """Build runs of a single workflow."""

    kind: Literal["workflow"] = "workflow"
    workflow_id: str = Field(..., min_length=1, description="CI workflow ID")

    @property
    def build_runs_path(self) -> str:
        return f"/ciWorkflows/{self.workflow_id}/buildRuns"


class ByProduct(BaseModel):
    """Build runs across every workflow of a product."""

    kind: Literal["product"] = "product"
    product_id: str = Field(..., min_length=1, description="CI product ID")

    @property
    def build_runs_path(self) -> str:
        return f"/ciProducts/{self.product_id}/buildRuns"


BuildRunSelector = ByWorkflow | ByProduct


def selector_from_ids(
    workflow_id: str | None = None, product_id: str | None = None
) -> BuildRunSelector:
    """Build a selector from exactly one of a workflow or product ID.

    Raises:
        InvalidArgumentError: If both or neither IDs are given

    """
    if workflow_id and product_id:
        raise InvalidArgumentError(
            "Provide either workflow_id or product_id, not both"
        )
    if workflow_id:
        return ByWorkflow(workflow_id=workflow_id)
    if product_id:
        return ByProduct(product_id=product_id)
    raise InvalidArgumentError("Either workflow_id or product_id is required")
