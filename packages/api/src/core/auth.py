# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer and by services that need to reason about
a caller's scope without pulling in Starlette.
"""

from db.enums import Party, UserRole

from ..schemas.auth import DataScope


def build_data_scope(role: UserRole, user_id: str, bank_id: str | None = None) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.STUDENT:
        return DataScope(own_cases_only=True, user_id=user_id)
    if role == UserRole.BANK:
        return DataScope(bank_id=bank_id)
    if role in (UserRole.STAFF, UserRole.ADMIN):
        return DataScope(full_pipeline=True)
    return DataScope()


def party_for_role(role: UserRole) -> Party:
    """Workflow party a user acts as when raising queries or sending messages."""
    if role == UserRole.STUDENT:
        return Party.STUDENT
    if role == UserRole.BANK:
        return Party.BANK
    return Party.INTERNAL_OPS
