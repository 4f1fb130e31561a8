# worthline/schemas/portfolio.py
"""
Pydantic schemas for point-in-time portfolio snapshots.

Amounts, prices, rates and values are decimal strings in canonical form
("100.5", never "100.50" or 1.005E2). Optional fields are left out when
unknown rather than sent as null.
"""

import datetime as dt

from pydantic import Field

from worthline.schemas.assets import AssetSchema
from worthline.schemas.base import OmitNoneModel


# =============================================================================
# BREAKDOWN ROWS
# =============================================================================

class AccountHoldingSchema(OmitNoneModel):
    """One account's share of an asset (detail mode only)."""

    account_id: str
    account_name: str
    amount: str = Field(..., description="Amount held in this account")
    balance_date: dt.date = Field(..., description="Date of the balance used")


class AssetSummarySchema(OmitNoneModel):
    """
    One by_asset row.

    price / price_date / price_timestamp are present whenever a price was
    found; fx_rate / fx_date whenever a conversion rate was used;
    value_in_base only when the asset could be fully valued.
    """

    asset: AssetSchema
    total_amount: str = Field(..., description="Total amount across accounts")
    amount_date: dt.date = Field(..., description="Most recent balance date among holdings")
    price: str | None = Field(default=None, description="Unit price in its quote currency")
    price_date: dt.date | None = Field(default=None, description="Date the price applies to")
    price_timestamp: str | None = Field(
        default=None,
        description="Capture instant of the price (RFC 3339, 'Z' suffix)",
    )
    fx_rate: str | None = Field(default=None, description="Conversion rate into the reporting currency")
    fx_date: dt.date | None = Field(default=None, description="Date of the FX rate")
    value_in_base: str | None = Field(default=None, description="Value in the reporting currency")
    holdings: list[AccountHoldingSchema] | None = Field(
        default=None,
        description="Per-account detail (detail mode only)",
    )


class AccountSummarySchema(OmitNoneModel):
    """One by_account row."""

    account_id: str
    account_name: str
    connection_name: str
    value_in_base: str | None = Field(
        default=None,
        description="Account value; omitted if any holding could not be valued",
    )


# =============================================================================
# SNAPSHOT RESPONSE
# =============================================================================

class PortfolioSnapshotResponse(OmitNoneModel):
    """
    Complete point-in-time valuation.

    by_asset / by_account are omitted when the requested grouping
    excludes them.
    """

    as_of_date: dt.date
    currency: str = Field(..., description="Reporting currency")
    total_value: str = Field(..., description="Sum of every valued asset")
    by_asset: list[AssetSummarySchema] | None = None
    by_account: list[AccountSummarySchema] | None = None
