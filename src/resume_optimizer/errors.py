"""Exception hierarchy shared by the workflow, gateway and loaders."""

from __future__ import annotations

from enum import Enum


class ResumeOptimizerError(Exception):
    """Base class for all resume-optimizer errors."""


class ResumeInputError(ResumeOptimizerError):
    """A resume supplied by the user could not be parsed or failed validation.

    Raised before any model call; ``errors`` holds field-qualified messages
    such as ``"basics.name is required."``.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class PreconditionError(ResumeOptimizerError):
    """A workflow transition was requested without its prerequisites."""


class WorkflowBusyError(PreconditionError):
    """A model request is already running for this session."""


class GatewayErrorKind(str, Enum):
    AUTH_FAILURE = "authFailure"
    QUOTA_EXCEEDED = "quotaExceeded"
    NETWORK_FAILURE = "networkFailure"
    PARSE_FAILURE = "parseFailure"
    UNKNOWN = "unknown"


GATEWAY_MESSAGES: dict[GatewayErrorKind, str] = {
    GatewayErrorKind.AUTH_FAILURE: "Invalid API key or authentication failed",
    GatewayErrorKind.QUOTA_EXCEEDED: "API quota exceeded",
    GatewayErrorKind.NETWORK_FAILURE: "Network error connecting to AI service",
    GatewayErrorKind.PARSE_FAILURE: "Failed to parse AI response",
    GatewayErrorKind.UNKNOWN: "AI request failed",
}

GATEWAY_STATUS_CODES: dict[GatewayErrorKind, int] = {
    GatewayErrorKind.AUTH_FAILURE: 401,
    GatewayErrorKind.QUOTA_EXCEEDED: 429,
    GatewayErrorKind.NETWORK_FAILURE: 502,
    GatewayErrorKind.PARSE_FAILURE: 500,
    GatewayErrorKind.UNKNOWN: 500,
}


class GatewayError(ResumeOptimizerError):
    """A model call failed; ``kind`` is the coarse classification."""

    def __init__(
        self,
        kind: GatewayErrorKind,
        message: str | None = None,
        details: str | None = None,
    ):
        self.kind = kind
        self.message = message or GATEWAY_MESSAGES[kind]
        self.details = details
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        return GATEWAY_STATUS_CODES[self.kind]
