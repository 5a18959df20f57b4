# This project was developed with assistance from AI tools.
"""Caller identity and case-visibility schemas."""

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field


class DataScope(BaseModel):
    """Which cases a caller may see.

    Exactly one rule applies: ``full_pipeline`` (staff, admin), ``bank_id``
    (cases with an application at that bank) or ``own_cases_only`` (cases
    whose ``student_user_id`` equals ``user_id``). An empty scope sees nothing.
    """

    full_pipeline: bool = False
    bank_id: str | None = None
    own_cases_only: bool = False
    user_id: str | None = None


class UserContext(BaseModel):
    """Resolved caller for one request; ``name`` is what history rows record."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str
    data_scope: DataScope = Field(default_factory=DataScope)


class TokenPayload(BaseModel):
    """Keycloak access-token claims the API reads."""

    sub: str
    email: str = ""
    preferred_username: str = ""
    name: str = ""
    bank_id: str | None = None
    realm_access: dict = Field(default_factory=dict)
