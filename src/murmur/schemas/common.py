"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

import math

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Offset pagination metadata returned alongside list results."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_count: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> Pagination:
        """Derive page flags from the requested window and the total row count."""
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=math.ceil(total_count / limit) if limit else 0,
            has_next_page=page * limit < total_count,
            has_previous_page=page > 1,
        )
