# This project was developed with assistance from AI tools.
"""Shared case scope filtering for service queries.

Centralizes the DataScope -> SQL WHERE logic so that every case-scoped
service applies the same tenant rules: staff see the whole pipeline, bank
users see cases that have an application with their bank, students see
their own cases.
"""

import logging

from db import BankApplication, Case
from sqlalchemy import exists, false, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ForbiddenError, NotFoundError
from ..schemas.auth import DataScope, UserContext

logger = logging.getLogger(__name__)


def apply_case_scope(stmt, scope: DataScope):
    """Restrict a statement over ``Case`` to the caller's scope."""
    if scope.full_pipeline:
        return stmt
    if scope.bank_id:
        return stmt.where(
            exists().where(
                BankApplication.case_id == Case.id,
                BankApplication.bank_id == scope.bank_id,
            )
        )
    if scope.own_cases_only and scope.user_id:
        return stmt.where(Case.student_user_id == scope.user_id)
    return stmt.where(false())


async def load_case(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    for_update: bool = False,
) -> Case:
    """Fetch a case the caller may see.

    Raises:
        NotFoundError: no case with this id.
        ForbiddenError: the case exists but lies outside the caller's scope.
    """
    stmt = select(Case).where(Case.id == case_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    case = result.scalar_one_or_none()
    if case is None:
        raise NotFoundError("Case", case_id)

    scoped = apply_case_scope(select(Case.id).where(Case.id == case_id), user.data_scope)
    visible = (await session.execute(scoped)).scalar_one_or_none()
    if visible is None:
        logger.warning(
            "Scope denied: user=%s role=%s attempted case %s",
            user.user_id,
            user.role.value,
            case_id,
        )
        raise ForbiddenError(f"Case {case_id} is outside your scope")
    return case
