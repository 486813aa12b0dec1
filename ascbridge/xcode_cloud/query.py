"""Compile structured query options into App Store Connect query parameters."""

from collections.abc import Mapping

from pydantic import BaseModel, Field

DEFAULT_LIMIT = 100
MIN_LIMIT = 1
MAX_LIMIT = 200


def sanitize_limit(limit: int | None, default: int = DEFAULT_LIMIT) -> int:
    """Clamp a page size to the range accepted by the API.

    Args:
        limit: Requested page size, or None for the default
        default: Page size used when limit is None

    Returns:
        Page size between 1 and 200 inclusive

    """
    if limit is None:
        limit = default
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


class QueryOptions(BaseModel):
    """Structured options for a collection or resource request."""

    limit: int | None = Field(default=None, description="Page size")
    include: list[str] | None = Field(
        default=None, description="Related resources to include"
    )
    filters: dict[str, str | None] = Field(
        default_factory=dict, description="Filter field to value"
    )
    sort: str | None = Field(
        default=None, description="Sort key, prefixed with '-' for descending"
    )
    paginated: bool = Field(
        default=True, description="Whether to emit a limit parameter"
    )

    def compile_params(self) -> dict[str, str | int]:
        """Flatten options into the API's query parameter scheme."""
        return compile_params(self)


def compile_params(options: QueryOptions) -> dict[str, str | int]:
    """Flatten query options into a parameter map.

    The result depends only on the options, in a stable key order:
    limit, include, filters (in the given order), sort.
    """
    params: dict[str, str | int] = {}

    if options.paginated:
        params["limit"] = sanitize_limit(options.limit)

    if options.include:
        params["include"] = ",".join(options.include)

    params.update(_filter_params(options.filters))

    if options.sort:
        params["sort"] = options.sort

    return params


def _filter_params(filters: Mapping[str, str | None]) -> dict[str, str]:
    return {
        f"filter[{field}]": value
        for field, value in filters.items()
        if value is not None
    }
