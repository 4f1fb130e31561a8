# worthline/schemas/history.py
"""
Pydantic schemas for history and change-point reports.

Timestamp formats differ on purpose and clients depend on both:
- history points:  "2024-01-15T10:00:00+00:00"
- change points:   "2024-01-15T10:00:00Z"
"""

import datetime as dt
from typing import ClassVar

from pydantic import Field

from worthline.schemas.assets import ChangeTriggerSchema
from worthline.schemas.base import OmitNoneModel


# =============================================================================
# HISTORY
# =============================================================================

class HistoryPointSchema(OmitNoneModel):
    """Portfolio value at one change point."""

    timestamp: str = Field(..., description="Change-point instant (RFC 3339, '+00:00')")
    date: dt.date = Field(..., description="UTC date the point was valued on")
    total_value: str
    change_triggers: list[str] | None = Field(
        default=None,
        description="What changed at this instant (omitted when nothing is recorded)",
    )


class HistorySummarySchema(OmitNoneModel):
    """First-to-last comparison."""

    initial_value: str
    final_value: str
    absolute_change: str
    percentage_change: str = Field(..., description="Two decimals, or 'N/A' when initial is 0")


class PortfolioHistoryResponse(OmitNoneModel):
    """
    Value-over-time report.

    start_date / end_date are always present (null when unbounded);
    summary is omitted with fewer than two points.
    """

    always_present_fields: ClassVar[frozenset[str]] = frozenset({"start_date", "end_date"})

    currency: str
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    granularity: str
    points: list[HistoryPointSchema] = Field(default_factory=list)
    summary: HistorySummarySchema | None = None


# =============================================================================
# CHANGE POINTS
# =============================================================================

class ChangePointSchema(OmitNoneModel):
    """One instant and the triggers that fired at it."""

    timestamp: str = Field(..., description="Change-point instant (RFC 3339, 'Z' suffix)")
    triggers: list[ChangeTriggerSchema] = Field(default_factory=list)


class ChangePointsResponse(OmitNoneModel):
    """Raw change-point timeline."""

    always_present_fields: ClassVar[frozenset[str]] = frozenset({"start_date", "end_date"})

    start_date: dt.date | None = None
    end_date: dt.date | None = None
    granularity: str
    include_prices: bool
    points: list[ChangePointSchema] = Field(default_factory=list)
