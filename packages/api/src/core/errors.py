# This project was developed with assistance from AI tools.
"""Workflow exception hierarchy.

Services raise these instead of HTTPException; ``main.py`` registers one
handler that renders any ``WorkflowError`` as RFC 7807 Problem Details
with the stable ``kind`` attached.
"""


class WorkflowError(Exception):
    """Base for every business-rule failure surfaced to callers."""

    kind = "workflow"
    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(WorkflowError):
    """A required field is missing or a payload is malformed for the domain.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """

    kind = "validation"
    status_code = 422

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class NotFoundError(WorkflowError):
    """Unknown case, thread, checklist item, or other resource id."""

    kind = "not_found"
    status_code = 404

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = resource
        if resource_id is not None:
            msg += f" id={resource_id}"
        super().__init__(f"{msg} not found")


class ForbiddenError(WorkflowError):
    """Caller's tenant scope does not include the requested case."""

    kind = "forbidden"
    status_code = 403


class ConflictError(WorkflowError):
    """Operation would duplicate a unique linkage."""

    kind = "conflict"
    status_code = 409

    def __init__(self, resource: str, field: str, value: str | int | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")


class StateError(WorkflowError):
    """Operation is not allowed in the entity's current state."""

    kind = "state"
    status_code = 409
