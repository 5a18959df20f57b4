# This project was developed with assistance from AI tools.
"""Pydantic response models for admin endpoints."""

from pydantic import BaseModel


class SeedResponse(BaseModel):
    """Response for POST /api/admin/seed.

    Counts are rows inserted by this call; zero means the data was already present.
    """

    status: str
    catalog_entries: int
    reminder_rules: int
    stage_expectations: int


class HealthResponse(BaseModel):
    """One component entry in GET /health/."""

    name: str
    status: str
    message: str
    version: str | None = None
