# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details error response schema."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details, extended with the workflow error kind.

    ``kind`` is empty for framework errors (routing, RBAC, authentication) and
    one of validation / not_found / forbidden / conflict / state for errors
    raised by the workflow services. ``errors`` maps offending fields to a
    short problem code when the failure is a validation error.

    See https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        description="URI reference identifying the problem type.",
    )
    title: str = Field(description="Short human-readable summary of the problem.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(
        default="",
        description="Human-readable explanation specific to this occurrence.",
    )
    instance: str = Field(default="", description="Request path that produced the problem.")
    request_id: str = Field(
        default="",
        description="Correlation ID for tracing this request in logs.",
    )
    kind: str = Field(default="", description="Stable workflow error kind.")
    errors: dict[str, str] = Field(
        default_factory=dict,
        description="Offending field -> problem, for validation failures.",
    )
