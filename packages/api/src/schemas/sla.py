# This project was developed with assistance from AI tools.
"""SLA evaluation schemas."""

import enum

from pydantic import BaseModel, computed_field


class SlaLevel(str, enum.Enum):
    ON_TRACK = "on_track"
    WARNING = "warning"
    BREACH = "breach"
    EXEMPT = "exempt"


class SlaBand(str, enum.Enum):
    PRE_LOGIN = "pre_login"
    LOGIN = "login"
    DOCS = "docs"
    REVIEW = "review"
    QUERY_RAISED = "query_raised"
    DECISION = "decision"
    POST_SANCTION_EARLY = "post_sanction_early"
    POST_SANCTION_LATE = "post_sanction_late"


class SlaEvaluation(BaseModel):
    """On-demand SLA classification for one case."""

    elapsed_days: int
    level: SlaLevel
    band: SlaBand | None = None
    warning_after_days: int | None = None
    breach_after_days: int | None = None

    @computed_field
    @property
    def warning(self) -> bool:
        return self.level == SlaLevel.WARNING

    @computed_field
    @property
    def breach(self) -> bool:
        return self.level == SlaLevel.BREACH
