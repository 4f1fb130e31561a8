# worthline/schemas/__init__.py
"""
Pydantic schemas for API responses.

- assets: Asset and change-trigger tagged unions
- base: OmitNoneModel (absent optionals are left out, not null)
- errors: Error response formats
- history: History and change-point reports
- portfolio: Point-in-time snapshots

Usage:
    from worthline.schemas import PortfolioSnapshotResponse, PortfolioHistoryResponse
"""

from worthline.schemas.assets import (
    AssetSchema,
    BalanceTriggerSchema,
    ChangeTriggerSchema,
    CryptoAssetSchema,
    CurrencyAssetSchema,
    EquityAssetSchema,
    FxRateTriggerSchema,
    PriceTriggerSchema,
)
from worthline.schemas.base import OmitNoneModel
from worthline.schemas.errors import ErrorDetail, ValidationErrorDetail
from worthline.schemas.history import (
    ChangePointSchema,
    ChangePointsResponse,
    HistoryPointSchema,
    HistorySummarySchema,
    PortfolioHistoryResponse,
)
from worthline.schemas.portfolio import (
    AccountHoldingSchema,
    AccountSummarySchema,
    AssetSummarySchema,
    PortfolioSnapshotResponse,
)

__all__ = [
    "OmitNoneModel",
    "AssetSchema",
    "CurrencyAssetSchema",
    "EquityAssetSchema",
    "CryptoAssetSchema",
    "ChangeTriggerSchema",
    "BalanceTriggerSchema",
    "PriceTriggerSchema",
    "FxRateTriggerSchema",
    "ErrorDetail",
    "ValidationErrorDetail",
    "AccountHoldingSchema",
    "AssetSummarySchema",
    "AccountSummarySchema",
    "PortfolioSnapshotResponse",
    "HistoryPointSchema",
    "HistorySummarySchema",
    "PortfolioHistoryResponse",
    "ChangePointSchema",
    "ChangePointsResponse",
]
