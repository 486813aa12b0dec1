"""Data models for configuration, Xcode Cloud resources and diagnostics."""

from ascbridge.xcode_cloud.models.config import AppStoreConnectConfig, load_config
from ascbridge.xcode_cloud.models.diagnostics import (
    ArtifactDownload,
    BuildFailureDetails,
    BuildRunOverview,
    BuildRunsSummary,
    BuildStatistics,
    FailedActionDetails,
)
from ascbridge.xcode_cloud.models.resources import (
    CiArtifact,
    CiBuildAction,
    CiBuildRun,
    CiIssue,
    CiProduct,
    CiTestResult,
    CiWorkflow,
    ListResponse,
    ResourceResponse,
    ScmGitReference,
)
from ascbridge.xcode_cloud.models.selectors import (
    BuildRunSelector,
    ByProduct,
    ByWorkflow,
    selector_from_ids,
)

__all__ = [
    "AppStoreConnectConfig",
    "ArtifactDownload",
    "BuildFailureDetails",
    "BuildRunOverview",
    "BuildRunSelector",
    "BuildRunsSummary",
    "BuildStatistics",
    "ByProduct",
    "ByWorkflow",
    "CiArtifact",
    "CiBuildAction",
    "CiBuildRun",
    "CiIssue",
    "CiProduct",
    "CiTestResult",
    "CiWorkflow",
    "FailedActionDetails",
    "ListResponse",
    "ResourceResponse",
    "ScmGitReference",
    "load_config",
    "selector_from_ids",
]
