"""Error types raised by the Xcode Cloud bridge."""


class XcodeCloudError(Exception):
    """Base class for errors raised deliberately by this package."""

    kind = "error"

    def __init__(self, message: str) -> None:
        """Initialize error with a human-readable message."""
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        """Return a structured representation for front ends."""
        return {"kind": self.kind, "message": self.message}


class ConfigurationError(XcodeCloudError):
    """Credential material is missing, unreadable or unusable."""

    kind = "configuration"


class InvalidArgumentError(XcodeCloudError):
    """Caller supplied an ill-formed or mutually exclusive argument set."""

    kind = "invalid_argument"


class BackendError(XcodeCloudError):
    """App Store Connect answered with a non-2xx status."""

    kind = "backend"

    def __init__(self, status_code: int, messages: list[str]) -> None:
        """Initialize error from a status code and the envelope's details."""
        self.status_code = status_code
        self.messages = messages
        detail = "; ".join(messages) if messages else "no detail provided"
        super().__init__(f"App Store Connect API error {status_code}: {detail}")

    @property
    def is_not_found(self) -> bool:
        """Whether the backend reported the resource as missing."""
        return self.status_code == 404

    def to_dict(self) -> dict[str, object]:
        """Return a structured representation including backend details."""
        return {
            "kind": self.kind,
            "message": self.message,
            "status_code": self.status_code,
            "messages": list(self.messages),
        }


class InvalidResponseError(XcodeCloudError):
    """App Store Connect answered 2xx with a body that cannot be parsed."""

    kind = "invalid_response"

    def __init__(self, path: str, detail: str) -> None:
        """Initialize error from the request path and the parse failure."""
        self.path = path
        self.detail = detail
        super().__init__(f"Unexpected response for {path}: {detail}")

    def to_dict(self) -> dict[str, object]:
        """Return a structured representation including the request path."""
        return {"kind": self.kind, "message": self.message, "path": self.path}
