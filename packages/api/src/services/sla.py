# This project was developed with assistance from AI tools.
"""SLA evaluation for cases.

Classifies a case as on-track, warning, or breach from its status and the
whole days elapsed since the last status / awaiting-party change. Computed
on demand and never persisted, so it cannot drift from the timestamp.
"""

from datetime import UTC, datetime

from db import Case
from db.enums import AwaitingParty, CaseStatus, StatusGroup

from ..schemas.sla import SlaBand, SlaEvaluation, SlaLevel

# (warning_after, breach_after) in whole days: warning when
# warning_after < days <= breach_after, breach when days > breach_after.
SLA_THRESHOLDS: dict[SlaBand, tuple[int, int]] = {
    SlaBand.PRE_LOGIN: (1, 2),
    SlaBand.LOGIN: (2, 3),
    SlaBand.DOCS: (2, 4),
    SlaBand.REVIEW: (4, 7),
    SlaBand.QUERY_RAISED: (3, 5),
    SlaBand.DECISION: (1, 2),
    SlaBand.POST_SANCTION_EARLY: (3, 5),
    SlaBand.POST_SANCTION_LATE: (4, 7),
}

_GROUP_BANDS: dict[StatusGroup, SlaBand] = {
    StatusGroup.PRE_LOGIN: SlaBand.PRE_LOGIN,
    StatusGroup.LOGIN: SlaBand.LOGIN,
    StatusGroup.DOCS: SlaBand.DOCS,
    StatusGroup.REVIEW: SlaBand.REVIEW,
    StatusGroup.DECISION: SlaBand.DECISION,
}

_POST_SANCTION_EARLY = frozenset({CaseStatus.SANCTION_ACCEPTED, CaseStatus.AGREEMENT_SIGNED})


def ensure_tz(dt: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def sla_band(status: CaseStatus) -> SlaBand | None:
    """Threshold band for a status; None for Closed-group statuses."""
    if status == CaseStatus.QUERY_RAISED:
        return SlaBand.QUERY_RAISED
    group = status.group
    if group == StatusGroup.POST_SANCTION:
        if status in _POST_SANCTION_EARLY:
            return SlaBand.POST_SANCTION_EARLY
        return SlaBand.POST_SANCTION_LATE
    return _GROUP_BANDS.get(group)


def elapsed_days(since: datetime, now: datetime) -> int:
    """Whole days between ``since`` and ``now``, floored and never negative."""
    delta = ensure_tz(now) - ensure_tz(since)
    return max(delta.days, 0)


def evaluate_sla(
    status: CaseStatus,
    awaiting_party: AwaitingParty,
    status_changed_at: datetime,
    *,
    now: datetime | None = None,
) -> SlaEvaluation:
    """Classify a case's SLA position.

    Args:
        status: Current case status.
        awaiting_party: Current awaiting party. ``Closed`` exempts the case.
        status_changed_at: When status or awaiting party last changed.
        now: Override for testing. Defaults to current UTC time.
    """
    if now is None:
        now = datetime.now(UTC)

    days = elapsed_days(status_changed_at, now)
    band = sla_band(status)

    if awaiting_party == AwaitingParty.CLOSED:
        return SlaEvaluation(elapsed_days=days, level=SlaLevel.EXEMPT, band=band)

    if band is None:
        return SlaEvaluation(elapsed_days=days, level=SlaLevel.ON_TRACK, band=None)

    warning_after, breach_after = SLA_THRESHOLDS[band]
    if days > breach_after:
        level = SlaLevel.BREACH
    elif days > warning_after:
        level = SlaLevel.WARNING
    else:
        level = SlaLevel.ON_TRACK

    return SlaEvaluation(
        elapsed_days=days,
        level=level,
        band=band,
        warning_after_days=warning_after,
        breach_after_days=breach_after,
    )


def evaluate_case_sla(case: Case, *, now: datetime | None = None) -> SlaEvaluation:
    """Evaluate SLA for an ORM case, falling back to created_at for the clock."""
    since = case.status_changed_at or case.created_at
    return evaluate_sla(case.status, case.awaiting_party, since, now=now)
