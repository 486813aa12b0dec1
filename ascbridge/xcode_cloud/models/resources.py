"""Models for Xcode Cloud resources returned by the App Store Connect API.

Resources follow the JSON:API layout used by App Store Connect:
``{"id", "type", "attributes", "relationships"}`` wrapped in a document
``{"data", "included", "links", "meta"}``. Attribute names are snake_case
in Python and camelCase on the wire. Unknown fields are kept so that no
backend data is dropped on the way through.
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ExecutionProgress = Literal["PENDING", "RUNNING", "COMPLETE"]
CompletionStatus = Literal["SUCCEEDED", "FAILED", "ERRORED", "CANCELED", "SKIPPED"]
IssueType = Literal["ERROR", "WARNING", "TEST_FAILURE", "ANALYZER_WARNING"]
TestResultStatus = Literal[
    "SUCCESS", "FAILURE", "EXPECTED_FAILURE", "MIXED", "SKIPPED", "UNKNOWN"
]
GitReferenceKind = Literal["BRANCH", "TAG"]

FAILED_COMPLETION_STATUSES: frozenset[str] = frozenset({"FAILED", "ERRORED"})


class ApiModel(BaseModel):
    """Base model mapping snake_case fields to camelCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class IssueCounts(ApiModel):
    """Issue totals reported for a build run or build action."""

    analyzer_warnings: int | None = None
    errors: int | None = None
    test_failures: int | None = None
    warnings: int | None = None


class CommitPerson(ApiModel):
    """Author or committer of a commit."""

    display_name: str | None = None
    avatar_url: str | None = None


class Commit(ApiModel):
    """Commit a build run was started from."""

    commit_sha: str | None = None
    author: CommitPerson | None = None
    committer: CommitPerson | None = None
    html_url: str | None = None
    message: str | None = None


class FileSource(ApiModel):
    """Source location of an issue or test."""

    path: str | None = None
    line_number: int | None = None


class Resource(ApiModel):
    """A single JSON:API resource object."""

    id: str = Field(..., description="Resource identifier")
    type: str = Field(..., description="Resource type")
    relationships: dict[str, object] | None = None
    links: dict[str, object] | None = None


class CiProductAttributes(ApiModel):
    """Attributes of a ciProducts resource."""

    name: str | None = None
    created_date: str | None = None
    product_type: str | None = None


class CiProduct(Resource):
    """App or framework configured for Xcode Cloud."""

    attributes: CiProductAttributes = Field(default_factory=CiProductAttributes)


class CiWorkflowAttributes(ApiModel):
    """Attributes of a ciWorkflows resource."""

    name: str | None = None
    description: str | None = None
    is_enabled: bool | None = None
    is_locked_for_editing: bool | None = None
    last_modified_date: str | None = None


class CiWorkflow(Resource):
    """Build, test and archive configuration of a product."""

    attributes: CiWorkflowAttributes = Field(default_factory=CiWorkflowAttributes)


class CiBuildRunAttributes(ApiModel):
    """Attributes of a ciBuildRuns resource."""

    number: int | None = None
    created_date: str | None = None
    started_date: str | None = None
    finished_date: str | None = None
    source_commit: Commit | None = None
    destination_commit: Commit | None = None
    is_pull_request_build: bool | None = None
    issue_counts: IssueCounts | None = None
    execution_progress: ExecutionProgress
    completion_status: CompletionStatus | None = None
    start_reason: str | None = None
    cancel_reason: str | None = None


class CiBuildRun(Resource):
    """One execution of a workflow."""

    attributes: CiBuildRunAttributes

    @property
    def status(self) -> str:
        """Completion status once complete, otherwise the execution progress."""
        attributes = self.attributes
        if attributes.execution_progress == "COMPLETE" and attributes.completion_status:
            return attributes.completion_status
        return attributes.execution_progress


class CiBuildActionAttributes(ApiModel):
    """Attributes of a ciBuildActions resource; name is free-form text."""

    name: str
    action_type: str | None = None
    started_date: str | None = None
    finished_date: str | None = None
    issue_counts: IssueCounts | None = None
    execution_progress: ExecutionProgress
    completion_status: CompletionStatus | None = None
    is_required_to_pass: bool | None = None


class CiBuildAction(Resource):
    """A build, analyze, test or archive step of a build run."""

    attributes: CiBuildActionAttributes

    @property
    def has_failed(self) -> bool:
        return self.attributes.completion_status in FAILED_COMPLETION_STATUSES

    @property
    def is_test(self) -> bool:
        """Whether this is a test action, judged by actionType before name."""
        kind = self.attributes.action_type or self.attributes.name
        return kind.upper() == "TEST"


class CiIssueAttributes(ApiModel):
    """Attributes of a ciIssues resource."""

    issue_type: IssueType
    message: str
    file_source: FileSource | None = None
    category: str | None = None


class CiIssue(Resource):
    """Error, warning or test failure reported by a build action."""

    attributes: CiIssueAttributes


class CiTestResultAttributes(ApiModel):
    """Attributes of a ciTestResults resource."""

    class_name: str | None = None
    name: str
    status: TestResultStatus
    message: str | None = None
    file_source: FileSource | None = None
    destination_test_results: list[dict[str, object]] | None = None


class CiTestResult(Resource):
    """Outcome of a single test in a test action."""

    attributes: CiTestResultAttributes


class CiArtifactAttributes(ApiModel):
    """Attributes of a ciArtifacts resource."""

    file_type: str
    file_name: str
    file_size: int
    download_url: str | None = None


class CiArtifact(Resource):
    """Log bundle, archive or other file produced by a build action."""

    attributes: CiArtifactAttributes


class ScmGitReferenceAttributes(ApiModel):
    """Attributes of a scmGitReferences resource."""

    name: str
    canonical_name: str | None = None
    is_deleted: bool | None = None
    kind: GitReferenceKind


class ScmGitReference(Resource):
    """Branch or tag of a source repository."""

    attributes: ScmGitReferenceAttributes


ResourceT = TypeVar("ResourceT", bound=Resource)


class ResourceResponse(ApiModel, Generic[ResourceT]):
    """Document holding a single resource."""

    data: ResourceT
    included: list[dict[str, object]] | None = None
    links: dict[str, object] | None = None


class ListResponse(ApiModel, Generic[ResourceT]):
    """Document holding one page of a resource collection."""

    data: list[ResourceT] = Field(default_factory=list)
    included: list[dict[str, object]] | None = None
    links: dict[str, object] | None = None
    meta: dict[str, object] | None = None
